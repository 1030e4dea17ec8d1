"""Tests for keyserver."""
