"""WEB API for keyserver."""
