"""Data classes and exceptions for the extractor module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Level(str, Enum):
    """How deep a catalog goes."""

    NAMESPACE = "namespace"
    CLASS = "class"
    FUNCTION = "function"
    TEST_CASE = "testcase"


class MarkerKind(str, Enum):
    """Marker kinds recognised in bundle sources.

    A decorator's kind is its terminal name lowercased with underscores
    dropped, so ``@test_fixture`` and ``@TestFixture`` are both ``FIXTURE``.
    """

    FIXTURE = "testfixture"
    TEST = "test"
    TEST_CASE = "testcase"
    TEST_CASE_SOURCE = "testcasesource"
    CATEGORY = "category"
    EXPLICIT = "explicit"
    IGNORE = "ignore"


TEST_MARKERS = frozenset({MarkerKind.TEST, MarkerKind.TEST_CASE, MarkerKind.TEST_CASE_SOURCE})
EXCLUDING_MARKERS = frozenset({MarkerKind.EXPLICIT, MarkerKind.IGNORE})


# ---------------------------------------------------------------------------
# Bundle metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Marker:
    """A recognised decorator and its string-constant arguments."""

    kind: MarkerKind
    args: tuple[str, ...] = ()


@dataclass
class MemberInfo:
    """A decorated definition: a class or a method."""

    name: str
    markers: list[Marker] = field(default_factory=list)

    @property
    def public(self) -> bool:
        return not self.name.startswith("_")

    def has(self, *kinds: MarkerKind) -> bool:
        """True if any marker is one of *kinds*."""
        return any(m.kind in kinds for m in self.markers)

    @property
    def categories(self) -> list[str]:
        return [arg for m in self.markers if m.kind is MarkerKind.CATEGORY for arg in m.args]


@dataclass
class MethodInfo(MemberInfo):
    """A method defined directly in a class body."""


@dataclass
class TypeInfo(MemberInfo):
    """A top-level class of a bundle module.

    ``bases`` holds the base class expressions as written (``Base`` or
    ``pkg.mod.Base``); they are resolved against the other types of the
    same binary.
    """

    namespace: str = ""
    methods: list[MethodInfo] = field(default_factory=list)
    bases: list[str] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name


@dataclass
class BinaryMetadata:
    """Everything the extractor knows about one test binary."""

    path: Path
    types: list[TypeInfo] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Catalog data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TestEntity:
    """A qualified test name at one granularity."""

    __test__ = False  # keep pytest from collecting this class

    level: Level
    name: str


@dataclass(frozen=True)
class CatalogEntry:
    """One catalog line: where an entity was found and the entity itself."""

    binary_path: str
    entity: TestEntity

    @property
    def name(self) -> str:
        return self.entity.name


@dataclass(frozen=True)
class ExtractOptions:
    """Settings for one extraction run, fixed before the first binary."""

    level: Level = Level.FUNCTION
    include_category: str | None = None
    exclude_category: str | None = None
    output: Path | None = None


def parse_level(value: str | Level) -> Level:
    """Parse a level name, ignoring case.

    Raises:
        ValueError: If *value* is not a known level.
    """
    if isinstance(value, Level):
        return value
    if value is None:
        raise ValueError("level must not be None")
    wanted = value.strip().lower()
    for member in Level:
        if wanted in (member.value, member.name.lower()):
            return member
    choices = ", ".join(m.value for m in Level)
    raise ValueError(f"Invalid level option: {value!r} (expected one of: {choices})")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ExtractorError(Exception):
    """Base exception for extractor operations."""


class BinaryNotFoundError(ExtractorError, FileNotFoundError):
    """Raised when a test binary path does not resolve to loadable metadata."""


class InvalidBinaryError(BinaryNotFoundError):
    """Raised when a path exists but is not a readable test binary."""


class NotSupportedError(ExtractorError, NotImplementedError):
    """Raised for extraction levels that are not implemented."""
