"""
Authentication module for the beauty clinic platform.

This module provides authentication and authorization functionality including:
- User registration and login
- Professional and clinic admin login
- Access and refresh JWT tokens
- Request dependencies resolving the caller
"""
