from dataclasses import dataclass, field
from enum import Enum
from typing import Final

# winget cuts long cells and appends a single ellipsis glyph.
_TRUNCATION_MARKERS: Final[tuple[str, ...]] = ("…", "...")


@dataclass(frozen=True, slots=True)
class PackageRecord:
    """Represents a row of a `winget search`/`list`/`upgrade` table.

    Attributes:
        id: Package identifier (e.g. "Google.Chrome").
        name: Display name.
        version: Installed (or latest, for search) version string.
        source: Source label (e.g. "winget", "msstore"). May be empty.
        available_version: Newer version, only present in upgrade listings.
    """

    id: str
    name: str = ""
    version: str = ""
    source: str = ""
    available_version: str = ""

    @property
    def truncated(self) -> bool:
        """Whether winget cut the identifier short to fit the column."""
        return self.id.endswith(_TRUNCATION_MARKERS)


@dataclass(frozen=True, slots=True)
class PackageDetail:
    """Represents the output of `winget show` (or a provisional stand-in)."""

    id: str = ""
    name: str = ""
    version: str = ""
    publisher: str = ""
    description: str = ""
    homepage: str = ""
    license: str = ""
    source: str = ""
    available_version: str = ""

    @classmethod
    def provisional(cls, record: PackageRecord) -> "PackageDetail":
        """Builds a partial detail from list data for instant display."""
        return cls(
            id=record.id,
            name=record.name,
            version=record.version,
            source=record.source,
            available_version=record.available_version,
        )


@dataclass(frozen=True, slots=True)
class ColumnSpec:
    """A header column and its start offset in display columns."""

    name: str
    start: int


@dataclass(frozen=True, slots=True)
class SourceSummary:
    """Represents a row of `winget source list`."""

    name: str
    argument: str = ""
    type: str = ""


class SourceFilter(Enum):
    ALL = "All"
    WINGET = "winget"
    MSSTORE = "msstore"

    def cycle(self) -> "SourceFilter":
        members = list(SourceFilter)
        return members[(members.index(self) + 1) % len(members)]

    def matches(self, source: str) -> bool:
        if self is SourceFilter.ALL:
            return True
        return source.casefold() == self.value.casefold()

    @property
    def cli_argument(self) -> str | None:
        """Value passed to `--source`, or None for no filtering."""
        if self is SourceFilter.ALL:
            return None
        return self.value

    def __str__(self) -> str:
        return self.value


class AppMode(Enum):
    SEARCH = "Search"
    INSTALLED = "Installed"
    UPGRADES = "Upgrades"

    def cycle(self) -> "AppMode":
        members = list(AppMode)
        return members[(members.index(self) + 1) % len(members)]

    def cycle_back(self) -> "AppMode":
        members = list(AppMode)
        return members[(members.index(self) - 1) % len(members)]

    @property
    def label(self) -> str:
        return self.value


class OperationKind(Enum):
    INSTALL = "install"
    UNINSTALL = "uninstall"
    UPGRADE = "upgrade"
    BATCH_UPGRADE = "batch-upgrade"


@dataclass(frozen=True, slots=True)
class Operation:
    """A mutating winget operation requested by the user.

    Attributes:
        kind: What to do.
        ids: Target package identifiers. Exactly one except for batch upgrades.
        version: Specific version to install (install only).
    """

    kind: OperationKind
    ids: tuple[str, ...]
    version: str | None = None

    @classmethod
    def install(cls, package_id: str, version: str | None = None) -> "Operation":
        return cls(OperationKind.INSTALL, (package_id,), version)

    @classmethod
    def uninstall(cls, package_id: str) -> "Operation":
        return cls(OperationKind.UNINSTALL, (package_id,))

    @classmethod
    def upgrade(cls, package_id: str) -> "Operation":
        return cls(OperationKind.UPGRADE, (package_id,))

    @classmethod
    def batch_upgrade(cls, package_ids: list[str]) -> "Operation":
        return cls(OperationKind.BATCH_UPGRADE, tuple(package_ids))

    @property
    def label(self) -> str:
        if self.kind is OperationKind.BATCH_UPGRADE:
            return f"Upgrading {len(self.ids)} packages"

        package_id = self.ids[0] if self.ids else ""
        if self.kind is OperationKind.INSTALL:
            if self.version:
                return f"Installing {package_id} v{self.version}"
            return f"Installing {package_id}"
        if self.kind is OperationKind.UNINSTALL:
            return f"Uninstalling {package_id}"
        return f"Upgrading {package_id}"


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a completed operation."""

    operation: Operation
    success: bool
    message: str = ""
    failed_ids: tuple[str, ...] = field(default_factory=tuple)
