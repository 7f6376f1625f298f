"""Domain services and error types."""
