"""Catalog reader plugin.

Reads the catalog written by ``testctl extract`` back into
:class:`~testctl.plugins.types.TestRecord` objects. Each line looks like::

    "/abs/path/to/bundle" | NsA.ClassB.MethodC

Blank lines and lines starting with ``#`` are skipped. Records keep file
order and duplicates.

This module is a regular plugin module: point a ``TestReader`` entry in
controller.yaml at this file and set ``reader.input_file``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from testctl.config import ControllerConfigError, load_controller_config
from testctl.plugins.base import PluginFactory, ReaderPlugin
from testctl.plugins.types import (
    CatalogFileNotFoundError,
    MalformedRecordError,
    PluginArgumentError,
    TestRecord,
)

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
FIELD_SEPARATOR = "|"


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1]
    return text


def parse_catalog(lines: Iterable[str]) -> list[TestRecord]:
    """Parse catalog lines into records.

    Raises:
        MalformedRecordError: If a line does not have exactly two fields.
    """
    records: list[TestRecord] = []
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        parts = line.split(FIELD_SEPARATOR)
        if len(parts) != 2:
            raise MalformedRecordError(line, number, len(parts))

        origin, identifier = (part.strip() for part in parts)
        records.append(TestRecord(origin=_unquote(origin), identifier=identifier))
    return records


class CatalogReaderPlugin(ReaderPlugin):
    """Reads test records from a persisted catalog file."""

    name = "CatalogReader"

    def __init__(self, input_file: str | Path) -> None:
        super().__init__()
        if input_file is None or not str(input_file).strip():
            raise PluginArgumentError("'input_file' must not be empty")
        self.input_file = Path(input_file)

    def execute(self) -> bool:
        if not self.input_file.is_file():
            raise CatalogFileNotFoundError(f"Couldn't find file: {self.input_file}")

        with open(self.input_file, encoding="utf-8-sig") as fh:
            records = parse_catalog(fh)

        self.tests.extend(records)
        logger.info("Read %d test(s) from %s", len(records), self.input_file)
        return True


class CatalogReaderFactory(PluginFactory):
    """Builds a :class:`CatalogReaderPlugin` from ``reader.input_file``."""

    def get_plugin(self, config_path: str) -> CatalogReaderPlugin:
        cfg = load_controller_config(config_path)
        if not cfg.reader.input_file:
            raise ControllerConfigError(f"'reader.input_file' is not set in {config_path}")
        return CatalogReaderPlugin(cfg.reader.input_file)
