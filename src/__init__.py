"""Lingo Mini: terminal quiz client for the Lingo Mini language-learning backend."""
