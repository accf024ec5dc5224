# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Tests for the command-line scripts."""

import json
import logging
from pathlib import Path

import pytest


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A small annotated project with a declaration source."""
    (tmp_path / ".acp.vars.json").write_text(
        json.dumps(
            {
                "variables": {
                    "API_KEY": "secret123",
                    "SYM_AUTH": {"value": "AuthService.login", "description": "Login entry"},
                }
            },
            indent=2,
        )
    )
    src = tmp_path / "src"
    src.mkdir()
    (src / "auth.ts").write_text(
        '// @acp:lock("frozen") - Audited\n'
        '// @acp:ref("$SYM_AUTH.ref $MISSING")\n'
        '// @acp:lock("melted")\n'
    )
    return tmp_path


class TestScanAnnotations:
    """Tests for scripts/scan_annotations.py."""

    def test_scan_directory(self, workspace: Path, capsys: pytest.CaptureFixture) -> None:
        from scripts.scan_annotations import main

        assert main([str(workspace)]) == 0
        out = capsys.readouterr().out

        assert "auth.ts:1:4: @acp:lock(\"frozen\") - Audited" in out
        assert "error [acp-invalid-lock-level]" in out
        assert "acp-unresolved-variable" not in out
        assert "3 annotations in 1 files, 1 errors" in out

    def test_check_variables(self, workspace: Path, capsys: pytest.CaptureFixture) -> None:
        from scripts.scan_annotations import main

        assert main([str(workspace / "src" / "auth.ts"), "--check-variables", "-w", str(workspace)]) == 0
        out = capsys.readouterr().out

        assert "auth.ts:2:" in out
        assert "Undefined variable: 'SYM_AUTH'" not in out
        assert "warning [acp-unresolved-variable] Undefined variable: 'MISSING'" in out

    def test_json_output(self, workspace: Path, capsys: pytest.CaptureFixture) -> None:
        from scripts.scan_annotations import main

        assert main([str(workspace), "--json"]) == 0
        report = json.loads(capsys.readouterr().out)

        (annotations_by_file,) = report.values()
        assert [a["namespace"] for a in annotations_by_file["annotations"]] == ["lock", "ref", "lock"]
        assert annotations_by_file["diagnostics"][0]["code"] == "acp-invalid-lock-level"

    def test_missing_path(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        from scripts.scan_annotations import main

        assert main([str(tmp_path / "nope")]) == 1
        assert "Path not found" in capsys.readouterr().out


class TestExpandVariables:
    """Tests for scripts/expand_variables.py."""

    def test_expand_text(self, workspace: Path, capsys: pytest.CaptureFixture) -> None:
        from scripts.expand_variables import main

        assert main(["Key $API_KEY costs $$5", "--workspace", str(workspace)]) == 0
        assert capsys.readouterr().out.strip() == "Key secret123 costs $5"

    def test_resolve_with_modifier(self, workspace: Path, capsys: pytest.CaptureFixture) -> None:
        from scripts.expand_variables import main

        assert main(["--resolve", "SYM_AUTH", "--modifier", "ref", "-w", str(workspace)]) == 0
        assert capsys.readouterr().out.strip() == "$SYM_AUTH"

    def test_resolve_failure(self, workspace: Path, capsys: pytest.CaptureFixture) -> None:
        from scripts.expand_variables import main

        assert main(["--resolve", "MISSING", "-w", str(workspace)]) == 1
        assert "Error (undefined)" in capsys.readouterr().out

    def test_list(self, workspace: Path, capsys: pytest.CaptureFixture) -> None:
        from scripts.expand_variables import main

        assert main(["--list", "-w", str(workspace)]) == 0
        out = capsys.readouterr().out

        assert "$FILE (string, built-in)" in out
        assert "$SYM_AUTH (symbol, .acp.vars.json) - Login entry" in out

    def test_verbose_logs_workspace_and_config(
        self, workspace: Path, capsys: pytest.CaptureFixture, caplog: pytest.LogCaptureFixture
    ) -> None:
        from scripts.expand_variables import main

        caplog.set_level(logging.DEBUG, logger="scripts.expand_variables")

        assert main(["$API_KEY", "-w", str(workspace), "-v"]) == 0
        assert f"Workspace: {workspace.resolve()}" in caplog.text
        assert "'duplicate_policy': 'first'" in caplog.text
