"""Formatting utilities for CLI reports.

- YAML format: human-readable run reports (default)
- JSON format: machine-readable structured data for programmatic access
"""

import json
from typing import Any

import yaml

from .engine.exceptions import WorkerFailure


def _plain(data: Any) -> Any:
    """Reduce data to JSON types (unknown objects become strings)."""
    return json.loads(json.dumps(data, default=str))


def format_data(data: Any, as_json: bool = False) -> str:
    """Format report data as YAML (default) or indented JSON."""
    if as_json:
        return json.dumps(data, indent=2, default=str)
    return yaml.safe_dump(_plain(data), default_flow_style=False, sort_keys=False)


def format_failure(failure: WorkerFailure, as_json: bool = False) -> str:
    """Format a raised failure (with its children tree) for stderr."""
    return format_data({"failure": failure.to_dict()}, as_json)


__all__ = ["format_data", "format_failure"]
