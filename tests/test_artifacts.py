from __future__ import annotations

import os
from pathlib import Path

import pytest

from vbcdriver import artifacts
from vbcdriver.artifacts import move_pdb_file_if_necessary
from vbcdriver.log import TaskLog


def _build_outputs(tmp_path: Path) -> tuple[Path, Path]:
    assembly = tmp_path / "bin" / "App.dll"
    assembly.parent.mkdir()
    assembly.write_bytes(b"MZ")
    generated = assembly.with_suffix(".pdb")
    generated.write_bytes(b"new symbols")
    return assembly, generated


def test_moves_generated_pdb_to_requested_name(tmp_path: Path) -> None:
    assembly, generated = _build_outputs(tmp_path)
    log = TaskLog()

    destination = move_pdb_file_if_necessary(str(tmp_path / "App.symbols"), str(assembly), log)

    assert destination == tmp_path / "App.symbols.pdb"
    assert destination.read_bytes() == b"new symbols"
    assert not generated.exists()
    assert log.events == []


def test_replaces_older_pdb(tmp_path: Path) -> None:
    assembly, generated = _build_outputs(tmp_path)
    desired = tmp_path / "App.pdb"
    desired.write_bytes(b"old symbols")
    os.utime(desired, (1_000_000, 1_000_000))

    destination = move_pdb_file_if_necessary(str(desired), str(assembly), TaskLog())

    assert destination == desired
    assert desired.read_bytes() == b"new symbols"


def test_keeps_newer_pdb(tmp_path: Path) -> None:
    assembly, generated = _build_outputs(tmp_path)
    os.utime(generated, (1_000_000, 1_000_000))
    desired = tmp_path / "App.pdb"
    desired.write_bytes(b"current symbols")

    assert move_pdb_file_if_necessary(str(desired), str(assembly), TaskLog()) is None
    assert desired.read_bytes() == b"current symbols"
    assert generated.exists()


@pytest.mark.parametrize(("pdb_file", "output_assembly"), [(None, "App.dll"), ("App.pdb", None)])
def test_nothing_to_move(pdb_file: str | None, output_assembly: str | None) -> None:
    assert move_pdb_file_if_necessary(pdb_file, output_assembly, TaskLog()) is None


def test_move_failure_is_logged(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assembly, _generated = _build_outputs(tmp_path)
    log = TaskLog()

    def fake_replace(*_args: object) -> None:
        raise PermissionError("locked")

    monkeypatch.setattr(artifacts.os, "replace", fake_replace)

    assert move_pdb_file_if_necessary(str(tmp_path / "App.pdb"), str(assembly), log) is None
    assert len(log.errors) == 1
    assert "locked" in log.errors[0].text
