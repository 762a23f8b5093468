"""
Beauty clinic booking API.

Multi-tenant backend for clinics, professionals, treatments, appointments,
consent forms, beauty points and VIP memberships.
"""
__version__ = "1.0.0"
