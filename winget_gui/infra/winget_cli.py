from typing import Callable

from winget_gui.core.output_normalizer import ExitPolicy, check_exit
from winget_gui.core.winget_show_parser import parse_show_output
from winget_gui.core.winget_table_parser import (
    parse_packages_from_table,
    parse_sources_from_table,
)
from winget_gui.core.winget_types import PackageDetail, PackageRecord, SourceSummary
from winget_gui.infra.process import ProcessOutput, run_process
from winget_gui.infra.winget import build_winget_argv, with_source

_ACCEPT_SOURCE = "--accept-source-agreements"
_ACCEPT_PACKAGE = "--accept-package-agreements"


class WingetCliBackend:
    """`PackageBackend` implementation that shells out to winget."""

    def __init__(
        self,
        executable: str | None = None,
        timeout_sec: float | None = None,
        runner: Callable[[list[str], float | None], ProcessOutput] = run_process,
    ):
        """Initializes the backend.

        Args:
            executable: winget path/name. Auto-detected when omitted.
            timeout_sec: Optional per-command timeout.
            runner: Process runner, replaceable in tests.
        """
        self._executable = executable
        self._timeout_sec = timeout_sec
        self._runner = runner

    def _run(self, args: list[str], policy: ExitPolicy) -> str:
        argv = build_winget_argv(*args, executable=self._executable)
        output = self._runner(argv, self._timeout_sec)
        return check_exit(output.stdout, output.stderr, output.returncode, policy)

    def search(self, query: str, source: str | None = None) -> list[PackageRecord]:
        args = with_source(["search", query, _ACCEPT_SOURCE], source)
        return parse_packages_from_table(self._run(args, ExitPolicy.LENIENT))

    def list_installed(self, source: str | None = None) -> list[PackageRecord]:
        args = with_source(["list", _ACCEPT_SOURCE], source)
        return parse_packages_from_table(self._run(args, ExitPolicy.LENIENT))

    def list_upgrades(self, source: str | None = None) -> list[PackageRecord]:
        args = with_source(["upgrade", _ACCEPT_SOURCE], source)
        return parse_packages_from_table(self._run(args, ExitPolicy.LENIENT))

    def show(self, package_id: str) -> PackageDetail:
        args = ["show", "--id", package_id, "--exact", _ACCEPT_SOURCE]
        return parse_show_output(self._run(args, ExitPolicy.LENIENT))

    def install(self, package_id: str, version: str | None = None) -> str:
        args = ["install", "--id", package_id, _ACCEPT_SOURCE, _ACCEPT_PACKAGE]
        if version:
            args += ["--version", version]
        return self._run(args, ExitPolicy.STRICT)

    def uninstall(self, package_id: str) -> str:
        args = ["uninstall", "--id", package_id, _ACCEPT_SOURCE]
        return self._run(args, ExitPolicy.STRICT)

    def upgrade(self, package_id: str) -> str:
        args = ["upgrade", "--id", package_id, _ACCEPT_SOURCE, _ACCEPT_PACKAGE]
        return self._run(args, ExitPolicy.STRICT)

    def list_sources(self) -> list[SourceSummary]:
        return parse_sources_from_table(self._run(["source", "list"], ExitPolicy.LENIENT))
