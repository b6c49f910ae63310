"""Server route modules."""
