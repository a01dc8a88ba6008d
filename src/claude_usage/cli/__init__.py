"""Command-line entry point for Claude Usage."""
