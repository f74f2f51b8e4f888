# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the idlkit CLI entry point."""

import json
import sys
from pathlib import Path
from typing import Any

import pytest

from idlkit.cli.main import main

# ###############
# Test Helpers
# ###############

PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

_TRANSFER = {
    "name": "transfer",
    "accounts": [
        {"name": "from", "isMut": True, "isSigner": True},
        {"name": "to", "isMut": True, "isSigner": False},
        {"name": "systemProgram", "isMut": False, "isSigner": False},
    ],
    "args": [{"name": "amount", "type": "u64"}],
}


def _project(tmp_path: Path, document: dict[str, Any] | None = None, extra_config: str = "") -> Path:
    """Create a config file and an IDL below *tmp_path* and return the IDL path."""
    document = document or {"name": "vault", "instructions": [_TRANSFER], "metadata": {"address": PROGRAM}}
    (tmp_path / ".idlkit.yaml").write_text(
        "program-name: vault\nidl-path: idl/vault.json\noutput-directory: generated\n" + extra_config,
        encoding="utf-8",
    )
    idl_path = tmp_path / "idl" / "vault.json"
    idl_path.parent.mkdir()
    idl_path.write_text(json.dumps(document), encoding="utf-8")
    return idl_path


def _run(monkeypatch: pytest.MonkeyPatch, *args: str) -> int | str | None:
    monkeypatch.setattr(sys, "argv", ["idlkit", *args])
    with pytest.raises(SystemExit) as exc_info:
        main()
    return exc_info.value.code


# ###############
# Public Interface
# ###############


def test_main_no_args_prints_help_and_exits(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    """main() with no subcommand prints help and exits with code 0."""
    assert _run(monkeypatch) == 0
    assert "usage: idlkit" in capsys.readouterr().out


# -------- init tests --------


def test_init_creates_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """init writes .idlkit.yaml named after the directory."""
    project = tmp_path / "my_program"
    project.mkdir()
    assert _run(monkeypatch, "init", str(project)) == 0
    content = (project / ".idlkit.yaml").read_text(encoding="utf-8")
    assert "program-name: my_program" in content
    assert "idl-path: idl/my_program.json" in content


def test_init_with_program_name(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assert _run(monkeypatch, "init", str(tmp_path), "--program-name", "vault") == 0
    assert "program-name: vault" in (tmp_path / ".idlkit.yaml").read_text(encoding="utf-8")


def test_init_default_directory_uses_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """init with no directory argument uses the current working directory."""
    monkeypatch.chdir(tmp_path)
    assert _run(monkeypatch, "init") == 0
    assert (tmp_path / ".idlkit.yaml").exists()


def test_init_fails_if_config_already_exists(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """init exits with error code 1 when a configuration already exists."""
    (tmp_path / ".idlkit.yaml").write_text("program-name: x\n", encoding="utf-8")
    assert _run(monkeypatch, "init", str(tmp_path)) == 1
    assert "configuration already exists" in capsys.readouterr().err


def test_init_fails_for_missing_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assert _run(monkeypatch, "init", str(tmp_path / "missing")) == 1


# -------- check tests --------


def test_check_without_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    assert _run(monkeypatch, "check", str(tmp_path)) == 1
    assert "Run 'idlkit init'" in capsys.readouterr().err


def test_check_valid_idl(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    _project(tmp_path)
    assert _run(monkeypatch, "check", str(tmp_path)) == 0
    out = capsys.readouterr().out
    assert "Checking IDL of 'vault'..." in out
    assert "No issues found." in out


def test_check_reports_semantic_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    bad = {**_TRANSFER, "args": [{"name": "amount", "type": {"defined": "Missing"}}]}
    _project(tmp_path, {"name": "vault", "instructions": [bad]})
    assert _run(monkeypatch, "check", str(tmp_path)) == 1
    assert "Error: Undefined type 'Missing'" in capsys.readouterr().err


def test_check_reports_warnings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    orphan = {"name": "Orphan", "type": {"kind": "struct", "fields": [{"name": "x", "type": "u8"}]}}
    _project(tmp_path, {"name": "vault", "instructions": [_TRANSFER], "types": [orphan]})
    assert _run(monkeypatch, "check", str(tmp_path)) == 0
    assert "Warning: Type 'Orphan' is never referenced" in capsys.readouterr().out


def test_check_warns_about_serializer_of_unknown_account(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    _project(tmp_path, extra_config="serializers:\n  Missing: serde.missing\n")
    assert _run(monkeypatch, "check", str(tmp_path)) == 0
    assert "Warning: Serializer configured for unknown account 'Missing'." in capsys.readouterr().out


def test_check_invalid_idl(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    idl_path = _project(tmp_path)
    idl_path.write_text("{", encoding="utf-8")
    assert _run(monkeypatch, "check", str(tmp_path)) == 1
    assert "Invalid JSON" in capsys.readouterr().err


def test_check_invalid_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    _project(tmp_path, extra_config="idl-generator: codama\n")
    assert _run(monkeypatch, "check", str(tmp_path)) == 1
    assert "'idl-generator' must be one of" in capsys.readouterr().err


# -------- generate tests --------


def test_generate_writes_package(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    _project(tmp_path)
    assert _run(monkeypatch, "generate", str(tmp_path)) == 0
    generated = tmp_path / "generated"
    assert (generated / "instructions" / "transfer.py").is_file()
    assert PROGRAM in (generated / "program_id.py").read_text(encoding="utf-8")
    assert "Wrote 7 file(s)" in capsys.readouterr().out


def test_generate_enhances_idl(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    idl_path = _project(
        tmp_path,
        {"name": "vault", "instructions": [_TRANSFER]},
        extra_config=f"program-id: {PROGRAM}\nidl-generator: anchor\n",
    )
    assert _run(monkeypatch, "generate", str(tmp_path)) == 0
    metadata = json.loads(idl_path.read_text(encoding="utf-8"))["metadata"]
    assert metadata == {"origin": "anchor", "address": PROGRAM}
    assert "Updated metadata of 'idl/vault.json'." in capsys.readouterr().out


def test_generate_without_enhancing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    document = {"name": "vault", "instructions": [_TRANSFER]}
    idl_path = _project(tmp_path, document, extra_config=f"program-id: {PROGRAM}\nenhance-idl: false\n")
    assert _run(monkeypatch, "generate", str(tmp_path)) == 0
    assert json.loads(idl_path.read_text(encoding="utf-8")) == document
    assert (tmp_path / "generated" / "program_id.py").exists()


def test_generate_shank_from_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _project(tmp_path, extra_config="idl-generator: shank\nenhance-idl: false\n")
    assert _run(monkeypatch, "generate", str(tmp_path)) == 0
    code = (tmp_path / "generated" / "instructions" / "transfer.py").read_text(encoding="utf-8")
    assert "TRANSFER_INSTRUCTION_DISCRIMINATOR" not in code


_BAD_NESTING = {
    "name": "vault",
    "instructions": [_TRANSFER],
    "types": [
        {"name": "Bad", "type": {"kind": "struct", "fields": [{"name": "x", "type": {"option": {"vec": "u8"}}}]}},
    ],
    "metadata": {"address": PROGRAM},
}


def test_generate_fails_fast(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    _project(tmp_path, _BAD_NESTING)
    assert _run(monkeypatch, "generate", str(tmp_path)) == 1
    assert "Error: " in capsys.readouterr().err
    assert not (tmp_path / "generated").exists()


def test_generate_continue_on_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    _project(tmp_path, _BAD_NESTING, extra_config="continue-on-error: true\n")
    assert _run(monkeypatch, "generate", str(tmp_path)) == 1
    assert "Error: skipped 'Bad':" in capsys.readouterr().err
    assert (tmp_path / "generated" / "instructions" / "transfer.py").is_file()


def test_generate_verbose_logs(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    _project(tmp_path)
    with caplog.at_level("DEBUG", logger="idlkit"):
        assert _run(monkeypatch, "--verbose", "generate", str(tmp_path)) == 0
    assert "rendering transfer" in caplog.text
