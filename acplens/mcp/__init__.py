# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""MCP server exposing annotation parsing and variable expansion."""

from .server import create_server, run_server

__all__ = ["create_server", "run_server"]
