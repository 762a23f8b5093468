"""Dashboard read model and wellness tips."""
