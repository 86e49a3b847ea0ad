from pathlib import Path

from winget_gui import config
from winget_gui.config import DEFAULT_LOG_DIR, AppConfig, load_config


def test_load_config_defaults(monkeypatch) -> None:
    monkeypatch.setattr(config, "find_winget_executable", lambda: "winget")

    assert load_config({}) == AppConfig(winget_executable="winget")


def test_load_config_reads_environment() -> None:
    cfg = load_config(
        {
            "WINGET_GUI_EXECUTABLE": r"C:\Tools\winget.exe",
            "WINGET_GUI_TIMEOUT": "90",
            "WINGET_GUI_POLL_MS": "20",
            "WINGET_GUI_LOG_LEVEL": "debug",
            "WINGET_GUI_LOG_DIR": "/tmp/winget-gui",
        }
    )

    assert cfg == AppConfig(
        winget_executable=r"C:\Tools\winget.exe",
        command_timeout_sec=90.0,
        poll_interval_ms=20,
        log_level="DEBUG",
        log_dir=Path("/tmp/winget-gui"),
    )


def test_load_config_ignores_invalid_numbers() -> None:
    cfg = load_config(
        {
            "WINGET_GUI_EXECUTABLE": "winget",
            "WINGET_GUI_TIMEOUT": "soon",
            "WINGET_GUI_POLL_MS": "-5",
        }
    )

    assert cfg.command_timeout_sec is None
    assert cfg.poll_interval_ms == config.DEFAULT_POLL_INTERVAL_MS
    assert cfg.log_dir == DEFAULT_LOG_DIR
