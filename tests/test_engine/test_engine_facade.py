# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Tests for the AnnotationEngine facade."""

import json
from pathlib import Path

SOURCE_URI = "file:///repo/src/auth.ts"

SOURCE = """\
// @acp:module("Auth")
/**
 * @acp:fn("login") - Signs a user in
 * @acp:ref("$SYM_AUTH.ref")
 * @acp:ref("$NOT_DECLARED")
 */
export function login() {}
"""


class TestParsing:
    """Tests for parsing through the engine."""

    def test_parse_document(self, provider) -> None:
        from acplens.engine import AnnotationEngine

        provider.open(SOURCE_URI, SOURCE)
        result = AnnotationEngine(provider).parse_document(SOURCE_URI)

        assert [a.namespace for a in result.annotations] == ["module", "fn", "ref", "ref"]

    def test_unknown_or_unsupported_document(self, provider) -> None:
        from acplens.engine import AnnotationEngine

        provider.open("file:///repo/notes.md", "# @acp:todo")
        engine = AnnotationEngine(provider)

        assert engine.parse_document("file:///repo/missing.ts") is None
        assert engine.parse_document("file:///repo/notes.md") is None

    def test_config_value_optional_namespaces(self) -> None:
        from acplens.config import EngineConfig
        from acplens.engine import AnnotationEngine

        engine = AnnotationEngine(config=EngineConfig(value_optional_namespaces=["purpose"]))
        result = engine.parse_annotations("typescript", "// @acp:purpose\n")

        assert result.diagnostics == []

    def test_variable_diagnostics(self, declare) -> None:
        from acplens.engine import AnnotationEngine
        from acplens.models import DiagnosticCode

        provider = declare({"SYM_AUTH": "AuthService.login"})
        provider.open(SOURCE_URI, SOURCE)
        diagnostics = AnnotationEngine(provider).variable_diagnostics(SOURCE_URI)

        assert len(diagnostics) == 1
        assert diagnostics[0].code == DiagnosticCode.UNRESOLVED_VARIABLE
        assert diagnostics[0].range.slice(SOURCE) == "$NOT_DECLARED"
        assert "Undefined variable" in diagnostics[0].message


class TestVariables:
    """Tests for variable resolution through the engine."""

    def test_resolve_and_expand(self, declare) -> None:
        from acplens.engine import AnnotationEngine

        engine = AnnotationEngine(declare({"API_KEY": "secret123"}))

        assert engine.resolve_variable("API_KEY").rendered == "secret123"
        assert engine.resolve_variable("API_KEY", "ref").rendered == "$API_KEY"
        assert engine.expand_all("key=$API_KEY, price=$$9") == "key=secret123, price=$9"
        assert engine.is_variable_defined("API_KEY")
        assert not engine.is_variable_defined("NOPE")

    def test_registry_refreshes_only_when_invalidated(self, declare, provider) -> None:
        from acplens.engine import AnnotationEngine

        declare({"API_KEY": "old"})
        engine = AnnotationEngine(provider)
        assert engine.expand_all("$API_KEY") == "old"

        provider.update("file:///repo/.acp.vars.json", json.dumps({"variables": {"API_KEY": "new"}}))
        assert engine.expand_all("$API_KEY") == "old"

        engine.invalidate_variables()
        assert engine.expand_all("$API_KEY") == "new"

        provider.update("file:///repo/.acp.vars.json", json.dumps({"variables": {"API_KEY": "newer"}}))
        engine.refresh_variables()
        assert engine.expand_all("$API_KEY") == "newer"

    def test_builtin_context_from_document(self, provider) -> None:
        from acplens.engine import AnnotationEngine

        provider.open(SOURCE_URI, SOURCE)
        engine = AnnotationEngine(provider)
        builtins = engine.builtin_context(SOURCE_URI, SOURCE.index("$SYM_AUTH"))

        assert builtins.file == "/repo/src/auth.ts"
        assert builtins.line == 4
        assert engine.expand_all("$FUNCTION in $MODULE at $LINE", builtins) == "login in Auth at 4"
        assert engine.builtin_context("file:///repo/none.ts", 0) is None

    def test_duplicates_and_policy(self, declare) -> None:
        from acplens.config import EngineConfig
        from acplens.engine import AnnotationEngine

        declare({"X": "a"}, uri="file:///repo/a/.acp.vars.json")
        provider = declare({"X": "b"}, uri="file:///repo/b/.acp.vars.json")

        assert AnnotationEngine(provider).duplicate_variables() == {"X": [".acp.vars.json", ".acp.vars.json"]}
        last = AnnotationEngine(provider, EngineConfig(duplicate_policy="last"))
        assert last.resolve_variable("X").rendered == "b"

    def test_max_depth_from_config(self, declare) -> None:
        from acplens.config import EngineConfig
        from acplens.engine import AnnotationEngine
        from acplens.models import ResolutionErrorKind

        engine = AnnotationEngine(declare({"A": "$B", "B": "b"}), EngineConfig(max_depth=1))

        assert engine.resolve_variable("A").error.kind == ResolutionErrorKind.DEPTH

    def test_list_available_variables(self, declare) -> None:
        from acplens.engine import AnnotationEngine

        engine = AnnotationEngine(declare({"API_KEY": "k"}))
        names = [v.name for v in engine.list_available_variables()]

        assert names[-1] == "API_KEY"
        assert "FILE" in names


class TestWorkspaceEngine:
    """Tests for an engine over files on disk."""

    def test_engine_for_workspace(self, tmp_path: Path) -> None:
        from acplens.engine import engine_for_workspace

        (tmp_path / ".acp.toml").write_text('duplicate_policy = "last"\n')
        (tmp_path / ".acp.vars.json").write_text(json.dumps({"variables": {"HOST": "api.example.com"}}))
        source = tmp_path / "client.py"
        source.write_text('# @acp:ref("https://$HOST/v1")\n')

        engine = engine_for_workspace(tmp_path)

        assert engine.config.duplicate_policy == "last"
        assert engine.expand_all("https://$HOST") == "https://api.example.com"
        result = engine.parse_document(source.resolve().as_uri())
        assert result.annotations[0].variable_refs[0].identifier == "HOST"
        assert engine.variable_diagnostics(source.resolve().as_uri()) == []
