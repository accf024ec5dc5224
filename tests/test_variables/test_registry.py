# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Tests for the variable registry."""

import json

import pytest


class TestRefresh:
    """Tests for rebuilding the registry from declaration sources."""

    def test_string_and_object_entries(self, declare) -> None:
        from acplens.variables.registry import VariableRegistry

        provider = declare(
            {
                "API_KEY": "secret123",
                "SYM_AUTH": {"value": "AuthService.login", "description": "Login entry"},
            }
        )
        registry = VariableRegistry(provider)
        registry.refresh()

        entry, source = registry.lookup("SYM_AUTH")
        assert entry.value == "AuthService.login"
        assert entry.description == "Login entry"
        assert source.name == ".acp.vars.json"
        assert registry.is_defined("API_KEY")
        assert not registry.is_defined("NOPE")

    def test_only_declaration_sources_are_read(self, provider) -> None:
        from acplens.variables.registry import VariableRegistry

        provider.open("file:///repo/src/app.ts", '{"variables": {"X": "1"}}')
        registry = VariableRegistry(provider)
        registry.refresh()

        assert registry.sources == []

    def test_nothing_read_before_refresh(self, declare) -> None:
        from acplens.variables.registry import VariableRegistry

        registry = VariableRegistry(declare({"A": "1"}))

        assert registry.is_stale
        assert registry.lookup("A") is None
        registry.ensure_fresh()
        assert not registry.is_stale
        assert registry.lookup("A") is not None

    def test_refresh_is_full_rebuild(self, declare, provider) -> None:
        from acplens.variables.registry import VariableRegistry

        declare({"OLD": "1"})
        registry = VariableRegistry(provider)
        registry.refresh()

        provider.update("file:///repo/.acp.vars.json", json.dumps({"variables": {"NEW": "2"}}))
        assert registry.is_defined("OLD")

        registry.invalidate()
        registry.ensure_fresh()
        assert registry.is_defined("NEW")
        assert not registry.is_defined("OLD")

    def test_definition_line(self, declare) -> None:
        from acplens.variables.registry import VariableRegistry

        registry = VariableRegistry(declare({"FIRST": "a", "SECOND": "b"}))
        registry.refresh()

        _, source = registry.lookup("SECOND")
        assert source.definition_line("FIRST") == 3
        assert source.definition_line("SECOND") == 4
        assert source.definition_line("MISSING") == 0


class TestMalformedSources:
    """Malformed input is skipped with a warning, never raised."""

    def test_unparsable_source_skipped(self, declare, provider, caplog: pytest.LogCaptureFixture) -> None:
        from acplens.variables.registry import VariableRegistry

        declare({"GOOD": "yes"})
        provider.open("file:///repo/pkg/.acp.vars.json", "{not json")
        registry = VariableRegistry(provider)
        registry.refresh()

        assert len(registry.sources) == 1
        assert registry.is_defined("GOOD")
        assert "Failed to parse vars file" in caplog.text

    def test_missing_variables_object(self, provider, caplog: pytest.LogCaptureFixture) -> None:
        from acplens.variables.registry import VariableRegistry

        provider.open("file:///repo/.acp.vars.json", '{"vars": {"A": "1"}}')
        registry = VariableRegistry(provider)
        registry.refresh()

        assert registry.sources == []
        assert "has no 'variables' object" in caplog.text

    def test_malformed_entry_skipped(self, declare, caplog: pytest.LogCaptureFixture) -> None:
        from acplens.variables.registry import VariableRegistry

        registry = VariableRegistry(declare({"GOOD": "x", "BAD": {"description": "no value"}}))
        registry.refresh()

        assert registry.is_defined("GOOD")
        assert not registry.is_defined("BAD")
        assert "Skipping malformed variable 'BAD'" in caplog.text

    def test_invalid_names_skipped(self, declare, caplog: pytest.LogCaptureFixture) -> None:
        from acplens.variables.registry import VariableRegistry

        registry = VariableRegistry(declare({"GOOD": "x", "lower": "y", "BAD\n": "z"}))
        registry.refresh()

        assert registry.is_defined("GOOD")
        assert not registry.is_defined("lower")
        assert not registry.is_defined("BAD\n")
        assert [name for name, _, _ in registry.entries()] == ["GOOD"]
        assert "Skipping variable 'lower'" in caplog.text


class TestDuplicates:
    """Tests for identifiers declared by more than one source."""

    def _registry(self, declare, policy: str):
        from acplens.variables.registry import VariableRegistry

        declare({"SHARED": "from-a", "ONLY_A": "a"}, uri="file:///repo/a/.acp.vars.json")
        provider = declare({"SHARED": "from-b"}, uri="file:///repo/b/acp.vars.json")
        registry = VariableRegistry(provider, duplicate_policy=policy)
        registry.refresh()
        return registry

    def test_first_wins_by_default(self, declare) -> None:
        registry = self._registry(declare, "first")

        entry, source = registry.lookup("SHARED")
        assert entry.value == "from-a"
        assert source.uri == "file:///repo/a/.acp.vars.json"

    def test_last_wins_when_configured(self, declare) -> None:
        registry = self._registry(declare, "last")

        entry, _ = registry.lookup("SHARED")
        assert entry.value == "from-b"
        assert registry.lookup("ONLY_A")[0].value == "a"

    def test_duplicates_reported(self, declare) -> None:
        registry = self._registry(declare, "first")

        assert registry.duplicates() == {"SHARED": [".acp.vars.json", "acp.vars.json"]}

    def test_unknown_policy_rejected(self, provider) -> None:
        from acplens.variables.registry import VariableRegistry

        with pytest.raises(ValueError):
            VariableRegistry(provider, duplicate_policy="random")
