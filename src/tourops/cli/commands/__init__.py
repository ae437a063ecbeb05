"""Click command groups, one module per record type."""
