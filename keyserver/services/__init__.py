"""Services for keyserver."""
