"""Graph model and relationship response types."""
