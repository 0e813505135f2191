"""Typer command registrations."""
