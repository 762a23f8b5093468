"""Appointment booking and lifecycle."""
