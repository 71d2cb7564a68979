from pathlib import Path

from tag_blocker.__main__ import cli, main


def test_settings_show_defaults(cli_runner) -> None:
    result = cli_runner.invoke(cli, ["settings", "show"])

    assert result.exit_code == 0
    assert "auto refresh" in result.output
    assert "true" in result.output
    assert "0 excluded / 0" in result.output


def test_settings_set(cli_runner, read_settings) -> None:
    result = cli_runner.invoke(cli, ["settings", "set", "--no-auto-refresh", "--debug-mode"])

    assert result.exit_code == 0
    stored = read_settings()
    assert stored["autoRefresh"] is False
    assert stored["debugMode"] is True


def test_invalid_settings_file_is_reported(cli_runner, settings_path: Path) -> None:
    settings_path.parent.mkdir(parents=True)
    settings_path.write_text("{oops", encoding="utf-8")

    result = cli_runner.invoke(cli, ["rules", "list"])

    assert result.exit_code != 0
    assert "Invalid JSON format" in result.output


def test_main_maps_click_errors_to_exit_code(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.argv", ["tag-blocker", "rules", "remove", "ghost"])

    assert main() == 2
    assert "Rule not found: ghost" in capsys.readouterr().err


def test_main_help_exits_cleanly(monkeypatch) -> None:
    monkeypatch.setattr("sys.argv", ["tag-blocker", "--help"])

    assert main() == 0
