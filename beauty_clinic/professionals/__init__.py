"""Clinic staff."""
