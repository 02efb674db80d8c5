"""Data classes and exceptions for the plugins module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PluginType(str, Enum):
    """Closed set of roles a plugin may fulfil."""

    TEST_READER = "TestReader"
    TEST_EXECUTOR = "TestExecutor"
    RESULTS_WRITER = "ResultsWriter"
    LOGGER = "Logger"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PluginDescriptor:
    """Where a plugin lives and which capability the controller expects.

    Both fields come straight from the controller configuration; they are
    validated by the loader, not here.
    """

    path: str
    type: str


@dataclass(frozen=True)
class TestRecord:
    """One test identifier read back from a persisted catalog."""

    __test__ = False  # keep pytest from collecting this class

    origin: str
    identifier: str


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class PluginError(Exception):
    """Base exception for plugin operations."""


class PluginArgumentError(PluginError, ValueError):
    """Raised when a descriptor field or loader argument is missing or blank."""


class UnknownPluginTypeError(PluginError, ValueError):
    """Raised when a capability string is not in :class:`PluginType`."""


class PluginModuleNotFoundError(PluginError, FileNotFoundError):
    """Raised when the plugin module file does not exist."""


class FactoryNotFoundError(PluginError):
    """Raised when a plugin module defines no concrete factory."""


class MultipleFactoriesError(PluginError):
    """Raised when a plugin module defines more than one concrete factory."""


class PluginLoadError(PluginError):
    """Raised when a plugin module cannot be imported or yields a non-plugin."""


class PluginTypeMismatchError(PluginError, TypeError):
    """Raised when a loaded plugin does not have the requested capability."""


class ReaderError(PluginError):
    """Base exception for catalog reader failures."""


class CatalogFileNotFoundError(ReaderError, FileNotFoundError):
    """Raised when the reader's input catalog does not exist."""


class MalformedRecordError(ReaderError, ValueError):
    """Raised when a catalog line does not split into exactly two fields."""

    def __init__(self, line: str, line_number: int, field_count: int) -> None:
        self.line = line
        self.line_number = line_number
        self.field_count = field_count
        super().__init__(
            f"Expected 2 parts ('|' separated) but found {field_count} "
            f"on line {line_number}: {line!r}"
        )
