"""Command-line interface (the `flows` entry point)."""
