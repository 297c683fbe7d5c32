"""Command-line interface for flexlogic."""
