"""Test bundle scanning and catalog generation."""

from testctl.extractor.catalog import (
    format_entry,
    generate_catalog,
    run_extraction,
    write_catalog,
)
from testctl.extractor.types import CatalogEntry, ExtractOptions, Level, TestEntity, parse_level

__all__ = [
    "CatalogEntry",
    "ExtractOptions",
    "Level",
    "TestEntity",
    "format_entry",
    "generate_catalog",
    "parse_level",
    "run_extraction",
    "write_catalog",
]
