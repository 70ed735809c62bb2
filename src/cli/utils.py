"""Shared helpers for CLI commands."""

from rich.console import Console

console = Console()

DEFAULT_BASE_URL = "http://localhost:8000"
