"""Command-line interface for aistorm."""
