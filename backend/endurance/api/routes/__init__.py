"""Built-in route modules — mounted after discovered module routes."""
