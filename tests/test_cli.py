import json
from pathlib import Path
import sys

import pytest

# Ensure project root is on the import path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from feednotes import __version__
from feednotes import cli
from feednotes.app import FeedNotes


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    monkeypatch.delenv("FEEDNOTES_FILE", raising=False)
    monkeypatch.delenv("FEEDNOTES_CONFIG", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_missing_notes_file_exits_non_zero(tmp_path, capsys):
    code = cli.main([])
    assert code == cli.EXIT_LOAD_FAILED
    assert "not found" in capsys.readouterr().err
    assert not (tmp_path / "data" / "feednotes" / "notes.json").exists()


def test_corrupt_notes_file_exits_non_zero(tmp_path, capsys):
    path = tmp_path / "notes.json"
    path.write_text("{not json", encoding="utf-8")
    assert cli.main(["--file", str(path)]) == cli.EXIT_LOAD_FAILED
    assert "malformed JSON" in capsys.readouterr().err


def test_bad_config_exits_with_config_code(tmp_path, capsys):
    config = tmp_path / "bad.yaml"
    config.write_text("keys:\n  normal:\n    q: explode\n", encoding="utf-8")
    notes = tmp_path / "notes.json"
    notes.write_text("[]", encoding="utf-8")
    assert cli.main(["--file", str(notes), "--config", str(config)]) == cli.EXIT_BAD_CONFIG
    assert "explode" in capsys.readouterr().err


def test_runs_app_with_loaded_store(tmp_path, monkeypatch):
    notes = tmp_path / "notes.json"
    notes.write_text(json.dumps([{"text": "hello"}]), encoding="utf-8")
    seen = []
    monkeypatch.setattr(FeedNotes, "run", lambda self: seen.append([n.text for n in self.store]))
    assert cli.main(["--file", str(notes)]) == cli.EXIT_OK
    assert seen == [["hello"]]


def test_unwritable_log_file_only_warns(tmp_path, capsys):
    log_dir = tmp_path / "taken.log"
    log_dir.mkdir()
    cli.setup_logging(log_dir, "INFO")
    assert "logging disabled" in capsys.readouterr().err


def test_runs_with_log_file_pointing_at_directory(tmp_path, monkeypatch, capsys):
    notes = tmp_path / "notes.json"
    notes.write_text("[]", encoding="utf-8")
    (tmp_path / "logdir").mkdir()
    config = tmp_path / "config.yaml"
    config.write_text(f"log_file: {tmp_path / 'logdir'}\n", encoding="utf-8")
    monkeypatch.setattr(FeedNotes, "run", lambda self: None)
    assert cli.main(["--file", str(notes), "--config", str(config)]) == cli.EXIT_OK
    assert "logging disabled" in capsys.readouterr().err
