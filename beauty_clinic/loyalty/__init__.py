"""Beauty points and rewards."""
