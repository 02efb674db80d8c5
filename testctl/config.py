"""Parse and validate controller.yaml configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from testctl.plugins.types import PluginDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "controller.yaml"


class ControllerConfigError(Exception):
    """Raised when controller.yaml is invalid or missing."""


@dataclass
class ReaderConfig:
    """Settings for reader plugins."""

    input_file: str | None = None


@dataclass
class ControllerConfig:
    """Parsed representation of ``controller.yaml``.

    Relative paths are resolved against the directory holding the file.

    Attributes:
        path: The file this configuration was read from.
        plugins: Plugin descriptors in file order.
        reader: Reader plugin settings.
    """

    path: Path
    plugins: list[PluginDescriptor] = field(default_factory=list)
    reader: ReaderConfig = field(default_factory=ReaderConfig)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _resolve(base: Path, value: object) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        return text
    p = Path(text).expanduser()
    return str(p if p.is_absolute() else base / p)


def _parse_plugin(base: Path, index: int, raw: object, source: Path) -> PluginDescriptor:
    if not isinstance(raw, dict):
        raise ControllerConfigError(
            f"Plugin entry #{index} in {source} must be a mapping, got {type(raw).__name__}"
        )
    # Blank fields are kept; the loader reports them.
    return PluginDescriptor(
        path=_resolve(base, raw.get("path")),
        type=str(raw.get("type") or ""),
    )


def _parse_reader(base: Path, raw: dict | None) -> ReaderConfig:
    if not raw:
        return ReaderConfig()
    input_file = _resolve(base, raw.get("input_file"))
    return ReaderConfig(input_file=input_file or None)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_controller_config(path: str | Path = DEFAULT_CONFIG_FILE) -> ControllerConfig:
    """Load and parse ``controller.yaml``.

    Args:
        path: Path to the controller configuration file.

    Returns:
        Parsed :class:`ControllerConfig`.

    Raises:
        ControllerConfigError: If the file is missing or malformed.
    """
    p = Path(path)
    if not p.is_file():
        raise ControllerConfigError(f"Configuration file not found: {p}")

    try:
        with open(p, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ControllerConfigError(f"Failed to parse {p}: {exc}") from exc

    if not isinstance(data, dict):
        raise ControllerConfigError(f"Expected a YAML mapping in {p}, got {type(data).__name__}")

    base = p.resolve().parent
    raw_plugins = data.get("plugins") or []
    if not isinstance(raw_plugins, list):
        raise ControllerConfigError(f"'plugins' in {p} must be a list")

    plugins = [_parse_plugin(base, i, raw, p) for i, raw in enumerate(raw_plugins, start=1)]
    reader = _parse_reader(base, data.get("reader"))
    logger.debug("Loaded %s: %d plugin(s)", p, len(plugins))

    return ControllerConfig(path=p, plugins=plugins, reader=reader)
