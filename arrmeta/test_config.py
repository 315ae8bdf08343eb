from pathlib import Path

import pytest

from arrmeta import cli
from arrmeta.config import DEFAULT_SERVER_URL, default_config, load_config


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_reads_server_and_console_sections(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "config.toml",
        '[server]\nurl = "http://decypharr:8282/"\ntimeout = 5\n\n[console]\ndebug = true\npage_size = 25\n',
    )
    config = load_config(path)
    assert config.server.url == "http://decypharr:8282/"
    assert config.server.timeout == 5
    assert config.console.debug is True
    assert config.console.page_size == 25
    assert config.config_path == path


def test_load_config_defaults_missing_sections(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path / "config.toml", ""))
    assert config.server.url == DEFAULT_SERVER_URL
    assert config.console.log_file is None


def test_load_config_exits_when_file_missing(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        load_config(tmp_path / "absent.toml")
    assert excinfo.value.code == 1


def test_load_config_exits_on_malformed_toml(tmp_path: Path) -> None:
    path = _write(tmp_path / "config.toml", "[server\nurl = ")
    with pytest.raises(SystemExit):
        load_config(path)


def test_default_config_accepts_url_override() -> None:
    assert default_config().server.url == DEFAULT_SERVER_URL
    assert default_config("http://other:1").server.url == "http://other:1"


def test_resolve_config_accepts_directory_and_url_override(tmp_path: Path) -> None:
    _write(tmp_path / "config.toml", '[server]\nurl = "http://from-file"\n')
    config = cli.resolve_config(str(tmp_path), "http://from-flag")
    assert config.server.url == "http://from-flag"
    assert config.config_path == tmp_path / "config.toml"


def test_resolve_config_without_file_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = cli.resolve_config(None, None)
    assert config.server.url == DEFAULT_SERVER_URL
    assert config.config_path is None
