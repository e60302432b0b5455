"""Content job pipeline nodes, one module per step."""
