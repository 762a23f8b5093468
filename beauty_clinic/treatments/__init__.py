"""Treatment catalogue."""
