"""Command-line interface for Lingo Mini."""
