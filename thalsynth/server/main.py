"""thalsynth MCP server entry point.

Exposes three tools: panel description, synthetic generation and the
quality / privacy report.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from thalsynth.audit import AuditLog
from thalsynth.config import PanelConfig
from thalsynth.server.tools import SynthesisServerTools

logger = logging.getLogger("thalsynth")


def create_server(
    config_path: str | None = None,
    audit_log: str | None = None,
    remote_url: str | None = None,
) -> tuple[Server, SynthesisServerTools]:
    """Create and configure the MCP server with the synthesis tools."""

    config = PanelConfig.from_file(config_path) if config_path else PanelConfig.default()
    server = Server("thalsynth-server")
    tools = SynthesisServerTools(
        config=config,
        audit_log=AuditLog(audit_log),
        remote_url=remote_url,
    )

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [
            Tool(
                name="describe_panel",
                description="Describe the screening panel: canonical columns, the signature classifier rules and the noise profiles used for generation.",
                inputSchema={
                    "type": "object",
                    "properties": {},
                    "required": [],
                },
            ),
            Tool(
                name="generate_synthetic",
                description="Generate synthetic screening-panel rows from a CSV or Excel file. Rows matching the thalassemia signature keep their diagnostic pattern; others receive wider noise.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "path": {
                            "type": "string",
                            "description": "Path to the original panel file (CSV or XLSX)",
                        },
                        "rows": {
                            "type": "integer",
                            "description": "Number of synthetic rows to generate",
                            "minimum": 1,
                        },
                        "seed": {
                            "type": "integer",
                            "description": "Random seed for reproducible output. Optional.",
                        },
                        "output_path": {
                            "type": "string",
                            "description": "CSV file to write the synthetic rows to. Optional.",
                        },
                    },
                    "required": ["path", "rows"],
                },
            ),
            Tool(
                name="privacy_report",
                description="Score a synthetic file against its original: per-feature distribution overlap, re-identification risk, attribute disclosure risk and rare attribute combinations.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "original_path": {
                            "type": "string",
                            "description": "Path to the original panel file",
                        },
                        "synthetic_path": {
                            "type": "string",
                            "description": "Path to the synthetic panel file",
                        },
                        "feature": {
                            "type": "string",
                            "description": "Numeric feature for the headline similarity (default: Hemoglobin)",
                        },
                        "bins": {
                            "type": "integer",
                            "description": "Histogram bin count (default: 50)",
                            "minimum": 1,
                        },
                        "output_path": {
                            "type": "string",
                            "description": "Markdown file to write the rendered report to. Optional.",
                        },
                    },
                    "required": ["original_path", "synthetic_path"],
                },
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        """Dispatch tool calls to SynthesisServerTools."""
        try:
            if name == "describe_panel":
                result = tools.describe_panel()
            elif name == "generate_synthetic":
                result = tools.generate_synthetic(
                    path=arguments["path"],
                    rows=arguments["rows"],
                    seed=arguments.get("seed"),
                    output_path=arguments.get("output_path"),
                )
            elif name == "privacy_report":
                result = tools.privacy_report(
                    original_path=arguments["original_path"],
                    synthetic_path=arguments["synthetic_path"],
                    feature=arguments.get("feature"),
                    bins=arguments.get("bins"),
                    output_path=arguments.get("output_path"),
                )
            else:
                result = {"error": f"Unknown tool: {name}"}

            return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

        except Exception as e:
            logger.exception("Tool %s failed", name)
            return [TextContent(type="text", text=json.dumps({"error": str(e)}))]

    return server, tools


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="thalsynth synthetic panel server")
    parser.add_argument("--config", type=str, help="Path to a JSON panel configuration")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level")
    parser.add_argument("--audit-log", type=str, help="Path to the JSONL audit log")
    parser.add_argument("--remote-url", type=str, help="Base URL of a remote generation service")
    return parser


async def main(argv: list[str] | None = None):
    """Run the MCP server."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper()))
    logger.info("Starting thalsynth server")

    server, tools = create_server(
        config_path=args.config,
        audit_log=args.audit_log,
        remote_url=args.remote_url,
    )

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
