"""End users and their profile."""
