"""Consent form templates and signed patient consents."""
