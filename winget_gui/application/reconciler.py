from dataclasses import replace
from typing import Callable, Protocol

from logly import logger

from winget_gui.application.app_state import AppState
from winget_gui.application.backend import PackageBackend
from winget_gui.application.messages import (
    AppMessage,
    DetailFailed,
    DetailLoaded,
    MessageChannel,
    OperationComplete,
    PackagesFailed,
    PackagesLoaded,
    StatusUpdate,
)
from winget_gui.core.errors import WingetError
from winget_gui.core.winget_types import (
    AppMode,
    Operation,
    OperationKind,
    OperationResult,
    PackageDetail,
    SourceFilter,
)


class TaskDispatcher(Protocol):
    """Schedules a unit of background work."""

    def submit(self, task: Callable[[], None]) -> None: ...


def merge_detail(fetched: PackageDetail, displayed: PackageDetail | None) -> PackageDetail:
    """Merges a freshly fetched detail over the one currently on screen.

    Summary fields keep the displayed value only when winget returned nothing
    for them; the descriptive fields always come from the fetch.
    """
    if displayed is None:
        return fetched
    return replace(
        fetched,
        id=fetched.id or displayed.id,
        name=fetched.name or displayed.name,
        version=fetched.version or displayed.version,
        source=fetched.source or displayed.source,
        available_version=fetched.available_version or displayed.available_version,
    )


def run_batch_upgrade(
    backend: PackageBackend,
    operation: Operation,
    report: Callable[[AppMessage], None],
) -> OperationResult:
    """Upgrades packages one after another.

    Steps never overlap since winget serializes on the Windows Installer lock.
    A failed step does not stop the batch, and finished steps stay applied.
    """
    total = len(operation.ids)
    failures: list[str] = []
    failed_ids: list[str] = []
    for step, package_id in enumerate(operation.ids, start=1):
        report(StatusUpdate(f"Upgrading {step}/{total}: {package_id}..."))
        try:
            backend.upgrade(package_id)
        except WingetError as e:
            logger.warning(f"Upgrade of {package_id} failed: {e}")
            failures.append(f"{package_id}: {e}")
            failed_ids.append(package_id)

    if not failures:
        return OperationResult(
            operation, True, f"All {total} packages upgraded successfully"
        )
    return OperationResult(
        operation,
        False,
        f"{total - len(failures)}/{total} succeeded, {len(failures)} failed: "
        + "; ".join(failures),
        failed_ids=tuple(failed_ids),
    )


class ResultReconciler:
    """Issues background fetches and applies their results to `AppState`.

    Every request bumps the generation of its query class before any work is
    scheduled. Results from older generations are dropped on arrival, which is
    the only protection against out-of-order completion: started processes are
    never cancelled.
    """

    def __init__(
        self,
        backend: PackageBackend,
        dispatcher: TaskDispatcher,
        channel: MessageChannel | None = None,
    ):
        self._backend = backend
        self._dispatcher = dispatcher
        self.channel = channel or MessageChannel()

    def _spawn(
        self,
        work: Callable[[], AppMessage],
        on_error: Callable[[str], AppMessage],
    ) -> None:
        """Schedules `work` and reports exactly one message for it."""
        send = self.channel.send

        def task() -> None:
            try:
                message = work()
            except WingetError as e:
                logger.warning(f"winget request failed: {e}")
                message = on_error(str(e))
            except Exception as e:
                logger.exception("Unexpected error in background task")
                message = on_error(str(e) or type(e).__name__)
            send(message)

        self._dispatcher.submit(task)

    # ---- Requests

    def refresh_view(self, state: AppState) -> None:
        """Reloads the package list for the current mode and source filter."""
        state.view_generation += 1
        generation = state.view_generation
        state.loading = True

        backend = self._backend
        mode = state.mode
        query = state.search_query.strip()
        source = state.source_filter.cli_argument

        def work() -> AppMessage:
            if mode is AppMode.SEARCH:
                packages = backend.search(query, source) if query else []
            elif mode is AppMode.INSTALLED:
                packages = backend.list_installed(source)
            else:
                packages = backend.list_upgrades(source)
            return PackagesLoaded(generation, packages)

        self._spawn(work, lambda message: PackagesFailed(generation, message))

    def load_detail(self, state: AppState, package_id: str) -> None:
        """Shows the detail of a package, fetching it unless cached.

        The generation is bumped even on a cache hit so that an older fetch still
        in flight cannot overwrite the cached detail when it lands.
        """
        state.detail_generation += 1

        cached = state.detail_cache.get(package_id)
        if cached is not None:
            state.detail = cached
            state.detail_loading = False
            return

        record = state.package_by_id(package_id)
        if record is None:
            state.detail = PackageDetail(id=package_id)
        else:
            state.detail = PackageDetail.provisional(record)
            if record.truncated:
                # `winget show --exact` cannot resolve a cut-off id.
                state.detail_loading = False
                return

        state.detail_loading = True
        generation = state.detail_generation
        backend = self._backend

        def work() -> AppMessage:
            return DetailLoaded(generation, backend.show(package_id))

        self._spawn(work, lambda message: DetailFailed(generation, message))

    def load_detail_for_selected(self, state: AppState) -> None:
        package = state.selected_package()
        if package is not None:
            self.load_detail(state, package.id)

    def execute_operation(self, state: AppState, operation: Operation) -> bool:
        """Runs a mutating operation in the background.

        Returns:
            False if another operation is still running and nothing was started.
        """
        if state.busy_operation:
            state.set_status("Another operation is still running")
            return False
        if not operation.ids:
            state.set_status("Nothing to do")
            return False

        state.busy_operation = True
        state.loading = True
        state.set_status(f"{operation.label}...")

        backend = self._backend
        send = self.channel.send

        def work() -> AppMessage:
            package_id = operation.ids[0]
            if operation.kind is OperationKind.INSTALL:
                message = backend.install(package_id, operation.version)
            elif operation.kind is OperationKind.UNINSTALL:
                message = backend.uninstall(package_id)
            elif operation.kind is OperationKind.UPGRADE:
                message = backend.upgrade(package_id)
            else:
                return OperationComplete(run_batch_upgrade(backend, operation, send))
            return OperationComplete(OperationResult(operation, True, message))

        self._spawn(
            work,
            lambda message: OperationComplete(
                OperationResult(operation, False, message, failed_ids=operation.ids)
            ),
        )
        return True

    def upgrade_marked(self, state: AppState) -> bool:
        """Upgrades every marked package as one sequential batch."""
        ids = [p.id for p in state.filtered_packages if p.id in state.marked_ids]
        if not ids:
            state.set_status("No packages marked")
            return False
        return self.execute_operation(state, Operation.batch_upgrade(ids))

    def upgrade_all(self, state: AppState) -> bool:
        """Upgrades every listed package that has a newer version available."""
        ids = [p.id for p in state.filtered_packages if p.available_version]
        if not ids:
            state.set_status("No upgrades available")
            return False
        return self.execute_operation(state, Operation.batch_upgrade(ids))

    # ---- View changes

    def _clear_detail(self, state: AppState) -> None:
        # Fetches still in flight must not repopulate the panel.
        state.detail_generation += 1
        state.detail = None
        state.detail_loading = False

    def set_mode(self, state: AppState, mode: AppMode) -> None:
        state.mode = mode
        state.selected = 0
        self._clear_detail(state)
        state.set_status("Loading...")
        self.refresh_view(state)

    def set_source_filter(self, state: AppState, source_filter: SourceFilter) -> None:
        state.source_filter = source_filter
        state.selected = 0
        state.set_status(f"Filter: {source_filter} — loading...")
        self.refresh_view(state)

    def cycle_mode(self, state: AppState, backwards: bool = False) -> None:
        self.set_mode(state, state.mode.cycle_back() if backwards else state.mode.cycle())

    def cycle_source_filter(self, state: AppState) -> None:
        self.set_source_filter(state, state.source_filter.cycle())

    def submit_search(self, state: AppState, query: str) -> None:
        state.search_query = query.strip()
        if not state.search_query:
            return
        state.mode = AppMode.SEARCH
        state.selected = 0
        state.set_status("Searching...")
        self.refresh_view(state)

    def refresh(self, state: AppState) -> None:
        state.set_status("Refreshing...")
        self.refresh_view(state)

    def select(self, state: AppState, index: int) -> None:
        if 0 <= index < len(state.filtered_packages) and index != state.selected:
            state.selected = index
            self.load_detail_for_selected(state)

    def move_selection(self, state: AppState, delta: int) -> None:
        """Moves the selection with wrap-around and shows the new row's detail."""
        if state.filtered_packages:
            state.move_selection(delta)
            self.load_detail_for_selected(state)

    # ---- Results

    def process_messages(self, state: AppState) -> int:
        """Applies every queued background result. Returns how many were handled."""
        messages = self.channel.drain()
        for message in messages:
            self.apply_message(state, message)
        return len(messages)

    def apply_message(self, state: AppState, message: AppMessage) -> None:
        if isinstance(message, PackagesLoaded):
            self._on_packages_loaded(state, message)
        elif isinstance(message, PackagesFailed):
            if message.generation < state.view_generation:
                logger.debug(f"Discarding stale list failure gen={message.generation}")
                return
            state.loading = False
            state.set_status(f"Error: {message.message}")
        elif isinstance(message, DetailLoaded):
            self._on_detail_loaded(state, message)
        elif isinstance(message, DetailFailed):
            if message.generation < state.detail_generation:
                logger.debug(f"Discarding stale detail failure gen={message.generation}")
                return
            state.detail_loading = False
            state.set_status(f"Error: {message.message}")
        elif isinstance(message, OperationComplete):
            self._on_operation_complete(state, message.result)
        elif isinstance(message, StatusUpdate):
            state.set_status(message.text)

    def _on_packages_loaded(self, state: AppState, message: PackagesLoaded) -> None:
        if message.generation < state.view_generation:
            logger.debug(f"Discarding stale package list gen={message.generation}")
            return

        state.packages = message.packages
        state.apply_filter()
        state.loading = False
        count = len(state.filtered_packages)
        state.set_status(f"{count} package{'' if count == 1 else 's'} found")

        package = state.selected_package()
        if package is None:
            self._clear_detail(state)
            return
        self.load_detail(state, package.id)

    def _on_detail_loaded(self, state: AppState, message: DetailLoaded) -> None:
        if message.generation < state.detail_generation:
            logger.debug(f"Discarding stale detail gen={message.generation}")
            return

        merged = merge_detail(message.detail, state.detail)
        if merged.id:
            state.detail_cache[merged.id] = merged
        state.detail = merged
        state.detail_loading = False

    def _on_operation_complete(self, state: AppState, result: OperationResult) -> None:
        operation = result.operation
        # Installed versions changed (or may have), whatever the outcome.
        for package_id in operation.ids:
            state.detail_cache.pop(package_id, None)
        if operation.kind is OperationKind.BATCH_UPGRADE:
            state.marked_ids.clear()

        if result.success:
            state.set_status(f"{operation.label} — done")
        else:
            state.set_status(f"{operation.label} — failed: {result.message}")
        logger.info(f"{operation.label} finished success={result.success}")
        if result.failed_ids:
            logger.warning(f"Failed packages: {', '.join(result.failed_ids)}")

        state.busy_operation = False
        state.loading = False
        self.refresh_view(state)
