"""Tests for the lofi-sync CLI via Typer's runner."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from lofi_sync.cli.main import _parse_assignment, app
from lofi_sync.core.card import MutableCardField

runner = CliRunner()


def _write(path: Path, data: Any) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _card(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": "c1",
        "title": "Original",
        "status": "todo",
        "priority": "medium",
        "labels": [],
        "assignees": [],
        "position": 0,
        "createdAt": "2023-01-01T00:00:00.000Z",
        "updatedAt": "2023-01-01T00:00:00.000Z",
    }
    payload.update(overrides)
    return payload


# ── merge ─────────────────────────────────────────────────────────────────────


class TestMergeCommand:
    def test_json_output_clean_merge(self, tmp_path: Path) -> None:
        local = _write(tmp_path / "local.json", _card())
        remote = _write(tmp_path / "remote.json", _card(title="Remote Update"))

        result = runner.invoke(app, ["merge", str(local), str(remote), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["card"]["title"] == "Remote Update"
        assert data["conflict"] is False
        assert data["fastPath"] is True

    def test_conflict_exit_code(self, tmp_path: Path) -> None:
        local = _write(
            tmp_path / "local.json",
            _card(title="Local", dirtyFields=["title"], syncSnapshot={"title": "Original"}),
        )
        remote = _write(tmp_path / "remote.json", _card(title="Remote"))

        result = runner.invoke(app, ["merge", str(local), str(remote), "--json"])

        assert result.exit_code == 2
        data = json.loads(result.stdout)
        assert data["card"]["title"] == "Local"
        assert data["card"]["syncStatus"] == "conflict"
        assert data["fields"]["title"] == "conflict"

    def test_conflict_without_failing(self, tmp_path: Path) -> None:
        local = _write(
            tmp_path / "local.json",
            _card(title="Local", dirtyFields=["title"], syncSnapshot={"title": "Original"}),
        )
        remote = _write(tmp_path / "remote.json", _card(title="Remote"))

        result = runner.invoke(
            app, ["merge", str(local), str(remote), "--no-fail-on-conflict", "--json"]
        )

        assert result.exit_code == 0

    def test_output_file_written(self, tmp_path: Path) -> None:
        local = _write(
            tmp_path / "local.json",
            _card(
                title="Local Title",
                dirtyFields=["title"],
                syncSnapshot={"title": "Original", "status": "todo"},
            ),
        )
        remote = _write(tmp_path / "remote.json", _card(status="done"))
        out = tmp_path / "merged.json"

        result = runner.invoke(app, ["merge", str(local), str(remote), "-o", str(out)])

        assert result.exit_code == 0
        merged = json.loads(out.read_text(encoding="utf-8"))
        assert merged["title"] == "Local Title"
        assert merged["status"] == "done"
        assert merged.get("syncStatus") != "conflict"
        assert "Merge Report [c1]" in result.stdout

    def test_invalid_card_file(self, tmp_path: Path) -> None:
        local = _write(tmp_path / "local.json", {"id": "c1"})
        remote = _write(tmp_path / "remote.json", _card())

        result = runner.invoke(app, ["merge", str(local), str(remote)])

        assert result.exit_code == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        remote = _write(tmp_path / "remote.json", _card())

        result = runner.invoke(app, ["merge", str(tmp_path / "nope.json"), str(remote)])

        assert result.exit_code == 1


# ── validate ──────────────────────────────────────────────────────────────────


class TestValidateCommand:
    def test_valid_card(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "card.json", _card())

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 0
        assert "Valid card c1" in result.stdout

    def test_valid_board(self, tmp_path: Path) -> None:
        board = {
            "id": "b1",
            "title": "Main",
            "columns": {"todo": {"id": "todo", "title": "To Do", "cards": ["c1"]}},
            "cards": {"c1": _card(syncStatus="conflict")},
        }
        path = _write(tmp_path / "board.json", board)

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 0
        assert "Valid board b1 (1 cards, 1 in conflict)" in result.stdout

    def test_invalid_card(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "card.json", _card(title=""))

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "card.json", [1, 2])

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1


# ── edit + sync ───────────────────────────────────────────────────────────────


class TestEditAndSync:
    def _stores(self, tmp_path: Path, card: dict[str, Any]) -> tuple[Path, Path]:
        local = _write(tmp_path / "local.json", {"cards": [card]})
        remote = _write(tmp_path / "remote.json", {"cards": [card]})
        return local, remote

    def test_edit_marks_dirty(self, tmp_path: Path) -> None:
        local, _ = self._stores(tmp_path, _card(syncStatus="synced"))

        result = runner.invoke(
            app, ["edit", "c1", "title=New title", "labels=bug,ui", "--store", str(local)]
        )

        assert result.exit_code == 0
        assert "dirty fields: labels, title" in result.stdout
        stored = json.loads(local.read_text(encoding="utf-8"))["cards"][0]
        assert stored["labels"] == ["bug", "ui"]
        assert stored["syncStatus"] == "dirty"
        assert stored["syncSnapshot"]["title"] == "Original"

    def test_edit_unknown_card(self, tmp_path: Path) -> None:
        local, _ = self._stores(tmp_path, _card())

        result = runner.invoke(app, ["edit", "zz", "title=x", "--store", str(local)])

        assert result.exit_code == 1

    def test_edit_empty_title_rejected(self, tmp_path: Path) -> None:
        local, _ = self._stores(tmp_path, _card(syncStatus="synced"))
        before = local.read_text(encoding="utf-8")

        result = runner.invoke(app, ["edit", "c1", "title=", "--store", str(local)])

        assert result.exit_code == 1
        assert local.read_text(encoding="utf-8") == before

        followup = runner.invoke(app, ["edit", "c1", "position=5", "--store", str(local)])
        assert followup.exit_code == 0

    def test_edit_then_sync_pushes(self, tmp_path: Path) -> None:
        local, remote = self._stores(tmp_path, _card(syncStatus="synced"))
        runner.invoke(app, ["edit", "c1", "title=Mine", "--store", str(local)])

        result = runner.invoke(
            app, ["sync", "--local", str(local), "--remote", str(remote), "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["counts"]["pushed"] == 1
        pushed = json.loads(remote.read_text(encoding="utf-8"))["cards"][0]
        assert pushed["title"] == "Mine"
        assert pushed["syncStatus"] == "synced"

    def test_sync_conflict_exit_code(self, tmp_path: Path) -> None:
        local, remote = self._stores(tmp_path, _card(syncStatus="synced"))
        _write(remote, {"cards": [_card(title="Theirs", syncStatus="synced")]})
        runner.invoke(app, ["edit", "c1", "title=Mine", "--store", str(local)])

        result = runner.invoke(app, ["sync", "--local", str(local), "--remote", str(remote)])

        assert result.exit_code == 2

    def test_sync_corrupt_store(self, tmp_path: Path) -> None:
        local = tmp_path / "local.json"
        local.write_text("{", encoding="utf-8")

        result = runner.invoke(
            app, ["sync", "--local", str(local), "--remote", str(tmp_path / "r.json")]
        )

        assert result.exit_code == 1


# ── assignment parsing ────────────────────────────────────────────────────────


class TestParseAssignment:
    def test_sequence_field(self) -> None:
        assert _parse_assignment("assignees=a, b,") == (MutableCardField.ASSIGNEES, ["a", "b"])

    def test_position(self) -> None:
        assert _parse_assignment("position=2.5") == (MutableCardField.POSITION, 2.5)

    def test_empty_description_clears(self) -> None:
        assert _parse_assignment("description=") == (MutableCardField.DESCRIPTION, None)

    @pytest.mark.parametrize("raw", ["title", "id=x", "position=abc"])
    def test_rejected(self, raw: str) -> None:
        with pytest.raises(ValueError):
            _parse_assignment(raw)


def test_version() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "lofi-sync v0.1.0" in result.stdout
