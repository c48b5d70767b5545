"""Small shared helpers: defaults and path handling."""
