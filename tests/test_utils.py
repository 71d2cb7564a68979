import json
from pathlib import Path

from tag_blocker.utils import (
    backup_file,
    compact_home_path,
    read_json,
    truncate,
    write_json,
)


def test_write_json_creates_parents_and_keeps_unicode(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "out.json"

    write_json(path, {"text": "héllo"})

    assert "héllo" in path.read_text(encoding="utf-8")
    assert read_json(path) == {"text": "héllo"}


def test_backup_file_copies_content(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps([1]), encoding="utf-8")

    backup = backup_file(path)

    assert backup.name.startswith("rules.json.bak-")
    assert backup.read_text(encoding="utf-8") == "[1]"


def test_truncate() -> None:
    assert truncate("short", 10) == "short"
    assert truncate("a" * 20, 10) == "aaaaaaa..."


def test_compact_home_path(tmp_path: Path) -> None:
    assert compact_home_path(tmp_path) == "~"
    assert compact_home_path(tmp_path / "x" / "y.json") == "~/x/y.json"
    assert compact_home_path("/elsewhere/file") == "/elsewhere/file"
