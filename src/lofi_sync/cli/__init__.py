"""Command-line interface for lofi-sync."""

from lofi_sync.cli.main import app, main

__all__ = ["app", "main"]
