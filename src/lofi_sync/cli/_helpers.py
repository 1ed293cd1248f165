"""Shared CLI helpers for configuration, file loading, and output formatting."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import typer

from lofi_sync.core.card import Card
from lofi_sync.schema import card_from_payload
from lofi_sync.utils.config import Config
from lofi_sync.utils.config import get_config as _get_config

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_config() -> Config:
    """Get CLI configuration."""
    return _get_config()


def setup_logging(debug: bool, config: Config) -> None:
    """Send log records to stderr so JSON on stdout stays clean."""
    level = logging.DEBUG if debug else config.log_level_value
    logging.basicConfig(level=level, stream=sys.stderr, force=True)


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async CLI command."""
    return asyncio.run(coro)


def load_json_file(path: Path) -> Any:
    """Read a JSON file.

    Raises:
        ValueError: If the file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise ValueError(f"Cannot read {path}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e


def load_card(path: Path) -> Card:
    """Load and validate a single card payload from a JSON file."""
    data = load_json_file(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return card_from_payload(data)


def fail(message: str) -> typer.Exit:
    """Print an error and build the exit to raise."""
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(1)


def output_json(data: Any, indent: int = 2) -> None:
    typer.echo(json.dumps(data, indent=indent, default=str))
