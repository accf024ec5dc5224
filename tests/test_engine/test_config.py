# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Tests for .acp.toml discovery and loading."""

from pathlib import Path

import pytest


class TestDiscoverConfig:
    """Tests for finding .acp.toml near a source path."""

    def test_finds_config_in_same_directory(self, tmp_path: Path) -> None:
        """Should find .acp.toml in the same directory as the source file."""
        from acplens.config import discover_config

        config = tmp_path / ".acp.toml"
        config.write_text("max_depth = 5\n")
        source = tmp_path / "a.ts"
        source.write_text("")

        assert discover_config(source) == config

    def test_finds_config_in_parent(self, tmp_path: Path) -> None:
        """Should walk up parent directories to find .acp.toml."""
        from acplens.config import discover_config

        config = tmp_path / ".acp.toml"
        config.write_text("")
        nested = tmp_path / "src" / "lib"
        nested.mkdir(parents=True)

        assert discover_config(nested) == config

    def test_closest_config_wins(self, tmp_path: Path) -> None:
        from acplens.config import discover_config

        (tmp_path / ".acp.toml").write_text("")
        inner = tmp_path / "pkg"
        inner.mkdir()
        (inner / ".acp.toml").write_text("")

        assert discover_config(inner) == inner / ".acp.toml"

    def test_stops_after_three_parents(self, tmp_path: Path) -> None:
        from acplens.config import discover_config

        (tmp_path / ".acp.toml").write_text("")
        deep = tmp_path / "a" / "b" / "c" / "d"
        deep.mkdir(parents=True)

        assert discover_config(deep) is None


class TestLoadConfig:
    """Tests for reading configuration."""

    def test_defaults(self) -> None:
        from acplens.config import load_config

        config = load_config(None)

        assert config.max_depth == 10
        assert config.duplicate_policy == "first"
        assert config.vars_file_patterns == [".acp.vars.json", "acp.vars.json"]
        assert config.value_optional_namespaces == []

    def test_values_read(self, tmp_path: Path) -> None:
        from acplens.config import load_config

        path = tmp_path / ".acp.toml"
        path.write_text(
            'max_depth = 4\nduplicate_policy = "last"\n'
            'value_optional_namespaces = ["note"]\nlog_level = "DEBUG"\n'
        )
        config = load_config(path)

        assert config.max_depth == 4
        assert config.duplicate_policy == "last"
        assert config.value_optional_namespaces == ["note"]
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "content",
        ['duplicate_policy = "random"\n', "max_depth = 0\n", "unknown_key = 1\n", "max_depth = [\n"],
    )
    def test_invalid_config_falls_back(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture, content: str
    ) -> None:
        from acplens.config import EngineConfig, load_config

        path = tmp_path / ".acp.toml"
        path.write_text(content)

        assert load_config(path) == EngineConfig()
        assert "Ignoring" in caplog.text
