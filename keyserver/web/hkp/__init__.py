"""HTTP Keyserver Protocol endpoints."""
