"""REST API for public keys."""
