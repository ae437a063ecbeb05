"""Command line interface for tourops."""
