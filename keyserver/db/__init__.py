"""Persistence layer: ormar models over a databases connection pool."""
