"""Typer command groups for the openwork CLI."""
