"""Shared infrastructure: security, middleware, pagination, envelopes and the router table."""
