"""keyserver API package."""
