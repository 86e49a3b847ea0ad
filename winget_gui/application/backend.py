from typing import Protocol

from winget_gui.core.winget_types import PackageDetail, PackageRecord, SourceSummary


class PackageBackend(Protocol):
    """Package manager operations consumed by the reconciler.

    Every method blocks until the underlying tool finishes and may raise a
    `WingetError` carrying a user-facing message. Implementations must be safe
    to call from several background threads at once.
    """

    def search(self, query: str, source: str | None = None) -> list[PackageRecord]:
        """Searches packages matching `query`, optionally within one source."""
        ...

    def list_installed(self, source: str | None = None) -> list[PackageRecord]:
        """Lists installed packages."""
        ...

    def list_upgrades(self, source: str | None = None) -> list[PackageRecord]:
        """Lists installed packages that have a newer version available."""
        ...

    def show(self, package_id: str) -> PackageDetail:
        """Returns the detail record of a single package."""
        ...

    def install(self, package_id: str, version: str | None = None) -> str:
        """Installs a package and returns winget's confirmation text."""
        ...

    def uninstall(self, package_id: str) -> str:
        ...

    def upgrade(self, package_id: str) -> str:
        ...

    def list_sources(self) -> list[SourceSummary]:
        """Lists configured package sources."""
        ...
