"""Typer CLI for RAID reconciliation."""
