"""Clinics, the tenants of the platform."""
