# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""MCP server for annotation parsing and variable expansion.

This server exposes the engine to LLMs via the Model Context Protocol. The
workspace is the directory named by ``ACP_WORKSPACE``, or the current
directory.
"""

import os
from pathlib import Path
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from acplens.documents.positions import LineIndex
from acplens.engine import AnnotationEngine, engine_for_workspace

# Global instance (lazy-loaded)
_engine: Optional[AnnotationEngine] = None


def _get_engine() -> AnnotationEngine:
    """Get or create the engine instance."""
    global _engine
    if _engine is None:
        _engine = engine_for_workspace(Path(os.environ.get("ACP_WORKSPACE", ".")))
    return _engine


def create_server() -> Server:
    """Create and configure the MCP server."""
    server = Server("acp-lens")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return [
            Tool(
                name="parse_annotations",
                description=(
                    "Parse @acp: annotations from source code comments. "
                    "Returns each annotation with its namespace, value, position "
                    "and any diagnostics."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "text": {
                            "type": "string",
                            "description": "Source code to parse",
                        },
                        "language_id": {
                            "type": "string",
                            "description": "Language id (e.g., 'typescript', 'python', 'rust')",
                        },
                    },
                    "required": ["text", "language_id"],
                },
            ),
            Tool(
                name="resolve_variable",
                description=(
                    "Resolve one $NAME variable declared in .acp.vars.json or built in "
                    "(FILE, LINE, FUNCTION, CLASS, MODULE)."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "identifier": {
                            "type": "string",
                            "description": "Variable name without '$' (e.g., 'SYM_AUTH')",
                        },
                        "modifier": {
                            "type": "string",
                            "description": "Optional rendering: full, ref or signature",
                        },
                    },
                    "required": ["identifier"],
                },
            ),
            Tool(
                name="expand_variables",
                description=(
                    "Expand every $NAME reference in text. '$$' is a literal '$'. "
                    "Unresolvable references become [ERROR: ...] markers."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "text": {
                            "type": "string",
                            "description": "Text containing variable references",
                        },
                    },
                    "required": ["text"],
                },
            ),
            Tool(
                name="list_variables",
                description="List built-in and declared variables of the workspace.",
                inputSchema={
                    "type": "object",
                    "properties": {},
                },
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle tool calls."""
        if name == "parse_annotations":
            return await _handle_parse(arguments)
        elif name == "resolve_variable":
            return await _handle_resolve(arguments)
        elif name == "expand_variables":
            return await _handle_expand(arguments)
        elif name == "list_variables":
            return await _handle_list(arguments)
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    return server


async def _handle_parse(arguments: dict[str, Any]) -> list[TextContent]:
    """Handle parse_annotations tool."""
    text = arguments.get("text", "")
    language_id = arguments.get("language_id", "")

    if not text:
        return [TextContent(type="text", text="Error: text is required")]
    if not language_id:
        return [TextContent(type="text", text="Error: language_id is required")]

    result = _get_engine().parse_annotations(language_id, text)
    if not result.annotations and not result.diagnostics:
        return [TextContent(type="text", text=f"No annotations found ({language_id})")]

    index = LineIndex(text)
    lines = [f"## Annotations ({len(result.annotations)})", ""]
    for annotation in result.annotations:
        position = index.position_at(annotation.range.start)
        lines.append(f"### @acp:{annotation.namespace} (line {position.line + 1})")
        lines.append(f"**Category**: {annotation.category.value}")
        if annotation.value is not None:
            lines.append(f"**Value**: {annotation.value}")
        if annotation.description:
            lines.append(f"**Description**: {annotation.description}")
        if annotation.metadata:
            lines.append(f"**Metadata**: {', '.join(annotation.metadata)}")
        if annotation.variable_refs:
            lines.append(f"**Variables**: {', '.join(ref.raw for ref in annotation.variable_refs)}")
        lines.append("")

    if result.diagnostics:
        lines.append("### Diagnostics")
        for diagnostic in result.diagnostics:
            position = index.position_at(diagnostic.range.start)
            lines.append(
                f"- {diagnostic.severity.name} {diagnostic.code.value} "
                f"at {position.line + 1}:{position.character + 1}: {diagnostic.message}"
            )

    return [TextContent(type="text", text="\n".join(lines))]


async def _handle_resolve(arguments: dict[str, Any]) -> list[TextContent]:
    """Handle resolve_variable tool."""
    identifier = arguments.get("identifier", "")
    modifier = arguments.get("modifier") or None

    if not identifier:
        return [TextContent(type="text", text="Error: identifier is required")]

    result = _get_engine().resolve_variable(identifier, modifier)
    if not result.success:
        lines = [f"## Unresolved: ${identifier}", "", f"**Reason**: {result.error.kind.value}"]
        lines.append(f"**Message**: {result.error.message}")
        if result.error.chain:
            lines.append(f"**Chain**: {' -> '.join(result.error.chain)}")
        return [TextContent(type="text", text="\n".join(lines))]

    variable = result.variable
    lines = [
        f"## ${variable.name}",
        "",
        f"**Type**: {variable.type.value}",
        f"**Value**: {result.rendered}",
        f"**Source**: {variable.source}",
    ]
    if variable.definition_line:
        lines.append(f"**Line**: {variable.definition_line}")
    if variable.description:
        lines.append(f"**Description**: {variable.description}")

    return [TextContent(type="text", text="\n".join(lines))]


async def _handle_expand(arguments: dict[str, Any]) -> list[TextContent]:
    """Handle expand_variables tool."""
    text = arguments.get("text", "")

    if not text:
        return [TextContent(type="text", text="Error: text is required")]

    return [TextContent(type="text", text=_get_engine().expand_all(text))]


async def _handle_list(arguments: dict[str, Any]) -> list[TextContent]:
    """Handle list_variables tool."""
    variables = _get_engine().list_available_variables()

    lines = [f"## Variables ({len(variables)})", ""]
    for variable in variables:
        description = f" - {variable.description}" if variable.description else ""
        lines.append(f"- **${variable.name}** ({variable.type.value}, {variable.source}){description}")

    return [TextContent(type="text", text="\n".join(lines))]


async def run_server() -> None:
    """Run the MCP server."""
    server = create_server()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Entry point for the MCP server."""
    import asyncio
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
