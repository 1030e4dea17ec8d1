"""HTTP Keyserver Protocol lookups."""
