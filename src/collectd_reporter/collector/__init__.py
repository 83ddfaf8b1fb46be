"""Built-in system collectors and the report scheduler."""
