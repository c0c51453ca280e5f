"""Typer sub-applications for the skinvault CLI."""
