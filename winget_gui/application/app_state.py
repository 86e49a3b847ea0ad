from dataclasses import dataclass, field

from winget_gui.core.winget_types import (
    AppMode,
    PackageDetail,
    PackageRecord,
    SourceFilter,
)


@dataclass
class AppState:
    """All mutable UI state. Owned and mutated by the UI thread only.

    Background tasks receive copies of the inputs they need, never this object.
    """

    mode: AppMode = AppMode.INSTALLED
    source_filter: SourceFilter = SourceFilter.ALL
    search_query: str = ""
    packages: list[PackageRecord] = field(default_factory=list)
    filtered_packages: list[PackageRecord] = field(default_factory=list)
    selected: int = 0
    # Package ids marked for batch operations.
    marked_ids: set[str] = field(default_factory=set)
    detail: PackageDetail | None = None
    detail_loading: bool = False
    status_message: str = "Loading..."
    loading: bool = False
    busy_operation: bool = False
    view_generation: int = 0
    detail_generation: int = 0
    detail_cache: dict[str, PackageDetail] = field(default_factory=dict)

    def apply_filter(self) -> None:
        """Recomputes `filtered_packages` and clamps the selection.

        With a non-All filter winget already filtered server-side and omits the
        Source column, so rows without a source are accepted as well.
        """
        self.filtered_packages = [
            p
            for p in self.packages
            if not p.source or self.source_filter.matches(p.source)
        ]

        if self.selected >= len(self.filtered_packages):
            self.selected = max(len(self.filtered_packages) - 1, 0)
        # Marked rows may no longer be listed.
        self.marked_ids.clear()

    def selected_package(self) -> PackageRecord | None:
        if 0 <= self.selected < len(self.filtered_packages):
            return self.filtered_packages[self.selected]
        return None

    def package_by_id(self, package_id: str) -> PackageRecord | None:
        for package in self.filtered_packages:
            if package.id == package_id:
                return package
        return None

    def move_selection(self, delta: int) -> None:
        """Moves the selection, wrapping around at both ends."""
        if not self.filtered_packages:
            return
        self.selected = (self.selected + delta) % len(self.filtered_packages)

    def toggle_marked(self, package_id: str) -> bool:
        """Toggles the batch mark of a package. Returns the new mark state."""
        if package_id in self.marked_ids:
            self.marked_ids.discard(package_id)
            return False
        self.marked_ids.add(package_id)
        return True

    def set_status(self, message: str) -> None:
        self.status_message = message
