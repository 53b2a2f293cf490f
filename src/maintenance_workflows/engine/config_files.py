"""Structured configuration file codec (JSON, YAML, INI).

Reads a configuration file into a nested dict and writes a nested dict back.
All functions return LoadResult instead of raising: callers decide whether a
failure is an action failure.

INI files map sections to nested dicts ({"section": {"key": "value"}}); keys
outside any section are not supported by configparser and are rejected.
"""

import configparser
import io
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .load_result import LoadResult

logger = logging.getLogger(__name__)


class ContentType(str, Enum):
    """Supported structured content types."""

    JSON = "json"
    YAML = "yaml"
    INI = "ini"


_EXTENSIONS: dict[str, ContentType] = {
    ".json": ContentType.JSON,
    ".yaml": ContentType.YAML,
    ".yml": ContentType.YAML,
    ".ini": ContentType.INI,
    ".cfg": ContentType.INI,
}


def supported_content_types() -> list[str]:
    return [content_type.value for content_type in ContentType]


def content_type_for(path: str | Path) -> ContentType | None:
    """Guess the content type from the file extension (None if unknown)."""
    return _EXTENSIONS.get(Path(path).suffix.lower())


def parse_content(text: str, content_type: ContentType | str) -> LoadResult[dict[str, Any]]:
    """Parse text of the given content type into a dict.

    Args:
        text: Raw file content
        content_type: ContentType member or its value

    Returns:
        LoadResult.success(dict) or LoadResult.failure(error_message)
    """
    try:
        kind = ContentType(content_type)
    except ValueError:
        return LoadResult.failure(
            f"Content type {content_type} not supported. "
            f"Supported types are [{', '.join(supported_content_types())}]."
        )

    try:
        if kind == ContentType.JSON:
            data = json.loads(text) if text.strip() else {}
        elif kind == ContentType.YAML:
            data = yaml.safe_load(text)
            if data is None:
                data = {}
        else:
            parser = configparser.ConfigParser(interpolation=None)
            parser.optionxform = str  # type: ignore[assignment,method-assign]
            parser.read_string(text)
            data = {section: dict(parser.items(section)) for section in parser.sections()}
    except (json.JSONDecodeError, yaml.YAMLError, configparser.Error) as e:
        return LoadResult.failure(f"Invalid {kind.value} content: {e}")

    if not isinstance(data, dict):
        return LoadResult.failure(
            f"Content must be a {kind.value} mapping, got {type(data).__name__}"
        )
    return LoadResult.success(data)


def dump_content(data: dict[str, Any], content_type: ContentType | str) -> LoadResult[str]:
    """Serialize a dict to text of the given content type."""
    try:
        kind = ContentType(content_type)
    except ValueError:
        return LoadResult.failure(f"Content type {content_type} not supported.")

    if kind == ContentType.JSON:
        return LoadResult.success(json.dumps(data, indent=4) + "\n")
    if kind == ContentType.YAML:
        return LoadResult.success(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))

    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    for section, values in data.items():
        if not isinstance(values, dict):
            return LoadResult.failure(
                f"INI content requires sections: key '{section}' is not a section"
            )
        parser[section] = {key: _ini_value(value) for key, value in values.items()}
    buffer = io.StringIO()
    parser.write(buffer)
    return LoadResult.success(buffer.getvalue())


def parse_file(path: str | Path, content_type: ContentType | str) -> LoadResult[dict[str, Any]]:
    """Read and parse a structured file."""
    file_path = Path(path)
    if not file_path.is_file():
        return LoadResult.failure(f"File not found: {file_path}")
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return LoadResult.failure(f"Failed to read file '{file_path}': {e}")
    return parse_content(text, content_type)


def write_file(
    data: dict[str, Any], path: str | Path, content_type: ContentType | str
) -> LoadResult[Path]:
    """Serialize and write a structured file."""
    file_path = Path(path)
    dumped = dump_content(data, content_type)
    if not dumped.is_success:
        return LoadResult.failure(dumped.error or "Serialization failed")
    try:
        file_path.write_text(dumped.unwrap(), encoding="utf-8")
    except OSError as e:
        return LoadResult.failure(f"Failed to write file '{file_path}': {e}")
    logger.debug("Wrote %s content to %s", content_type, file_path)
    return LoadResult.success(file_path)


def _ini_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


__all__ = [
    "ContentType",
    "content_type_for",
    "supported_content_types",
    "parse_content",
    "dump_content",
    "parse_file",
    "write_file",
]
