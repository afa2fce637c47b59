"""Command line interface for meshdns."""
