from typing import Callable

import pytest

from winget_gui.application.app_state import AppState
from winget_gui.application.reconciler import ResultReconciler
from winget_gui.core.errors import WingetError
from winget_gui.core.winget_types import PackageDetail, PackageRecord, SourceSummary


class FakeBackend:
    """In-memory `PackageBackend` that records every call."""

    def __init__(self) -> None:
        self.installed: list[PackageRecord] = []
        self.upgrades: list[PackageRecord] = []
        self.search_results: list[PackageRecord] = []
        self.details: dict[str, PackageDetail] = {}
        self.sources: list[SourceSummary] = []
        # (method, argument) -> error raised by that call
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str | None]] = []

    def _record(self, method: str, argument: str | None) -> None:
        self.calls.append((method, argument))
        error = self.failures.get((method, argument or ""))
        if error is not None:
            raise error

    def search(self, query: str, source: str | None = None) -> list[PackageRecord]:
        self._record("search", query)
        return list(self.search_results)

    def list_installed(self, source: str | None = None) -> list[PackageRecord]:
        self._record("list_installed", source)
        return list(self.installed)

    def list_upgrades(self, source: str | None = None) -> list[PackageRecord]:
        self._record("list_upgrades", source)
        return list(self.upgrades)

    def show(self, package_id: str) -> PackageDetail:
        self._record("show", package_id)
        if package_id not in self.details:
            raise WingetError(f"No package found matching input criteria: {package_id}")
        return self.details[package_id]

    def install(self, package_id: str, version: str | None = None) -> str:
        self._record("install", package_id)
        return "Successfully installed"

    def uninstall(self, package_id: str) -> str:
        self._record("uninstall", package_id)
        return "Successfully uninstalled"

    def upgrade(self, package_id: str) -> str:
        self._record("upgrade", package_id)
        return "Successfully installed"

    def list_sources(self) -> list[SourceSummary]:
        self._record("list_sources", None)
        return list(self.sources)


class DeferredDispatcher:
    """Holds submitted tasks until a test runs them, in any order."""

    def __init__(self) -> None:
        self.tasks: list[Callable[[], None]] = []

    def submit(self, task: Callable[[], None]) -> None:
        self.tasks.append(task)

    def run(self, index: int = 0) -> None:
        self.tasks.pop(index)()

    def run_all(self) -> None:
        while self.tasks:
            self.run()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def dispatcher() -> DeferredDispatcher:
    return DeferredDispatcher()


@pytest.fixture
def reconciler(backend: FakeBackend, dispatcher: DeferredDispatcher) -> ResultReconciler:
    return ResultReconciler(backend, dispatcher)


@pytest.fixture
def state() -> AppState:
    return AppState()


@pytest.fixture
def chrome() -> PackageRecord:
    return PackageRecord(
        id="Google.Chrome",
        name="Google Chrome",
        version="131.0.6778",
        source="winget",
        available_version="132.0.6834",
    )


@pytest.fixture
def firefox() -> PackageRecord:
    return PackageRecord(
        id="Mozilla.Firefox",
        name="Mozilla Firefox",
        version="133.0",
        source="winget",
        available_version="134.0.1",
    )
