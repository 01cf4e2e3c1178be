"""
Command Line Argument Parsing for the Supadata Command Dispatcher

Handles tool selection, argument input options and configuration
overrides.
"""

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from supadata_mcp import __version__
from supadata_mcp.core.commands import COMMAND_SPECS


class CLIManager:
    """
    Command line interface manager

    Parses the tool name and its JSON arguments, validates the input
    options and renders the tool listing.
    """

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all options

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            prog="supadata-mcp",
            description="Run a Supadata command and print its reply envelope",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter,
            epilog=self._get_epilog()
        )

        # Tool selection
        tool_group = parser.add_argument_group("Tool")
        tool_group.add_argument(
            "--tool",
            help="Command to run (e.g. scrape, map, crawl, check_crawl_status)"
        )
        args_source = tool_group.add_mutually_exclusive_group()
        args_source.add_argument(
            "--args",
            dest="tool_args",
            help="Command arguments as a JSON object"
        )
        args_source.add_argument(
            "--args-file",
            help="Path to a JSON file holding the command arguments"
        )
        tool_group.add_argument(
            "--list-tools",
            action="store_true",
            help="List available commands and their arguments, then exit"
        )

        # Configuration options
        config_group = parser.add_argument_group("Configuration")
        config_group.add_argument(
            "--config",
            default="config/config.yaml",
            help="Path to configuration file (optional)"
        )
        config_group.add_argument(
            "--log-level",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Logging level"
        )
        config_group.add_argument(
            "--max-attempts",
            type=int,
            help="Maximum attempts for rate-limited calls"
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"supadata-mcp v{__version__}"
        )

        return parser

    def _get_epilog(self) -> str:
        return """
Examples:
  # Scrape a single page
  python -m supadata_mcp --tool scrape --args '{"url": "https://example.com"}'

  # Start a crawl, then poll it
  python -m supadata_mcp --tool crawl --args '{"url": "https://example.com", "limit": 50}'
  python -m supadata_mcp --tool check_crawl_status --args '{"id": "<job id>"}'

  # List commands
  python -m supadata_mcp --list-tools

Notes:
  - SUPADATA_API_KEY must be set unless CLOUD_SERVICE=true
  - Retry settings come from SUPADATA_RETRY_* environment variables
"""

    def parse_arguments(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command line arguments

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        parsed_args = self.parser.parse_args(args)
        self.validate_arguments(parsed_args)
        return parsed_args

    def validate_arguments(self, args: argparse.Namespace) -> bool:
        """
        Validate parsed arguments for consistency

        Exits through ``parser.error`` when they are not.
        """
        if not args.list_tools and not args.tool:
            self.parser.error("--tool is required unless --list-tools is given")

        if args.args_file and not Path(args.args_file).is_file():
            self.parser.error(f"Arguments file not found: {args.args_file}")

        if args.max_attempts is not None and args.max_attempts <= 0:
            self.parser.error("Maximum attempts must be greater than 0")

        return True

    def get_tool_arguments(self, args: argparse.Namespace) -> Optional[Dict[str, Any]]:
        """
        Load the command argument bag

        Returns:
            Parsed JSON object, or None when no arguments were given

        Raises:
            ValueError: If the JSON is malformed or not an object
        """
        if args.args_file:
            raw = Path(args.args_file).read_text(encoding='utf-8')
        elif args.tool_args:
            raw = args.tool_args
        else:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON arguments: {e}")

        if not isinstance(data, dict):
            raise ValueError("Command arguments must be a JSON object")
        return data

    def format_tool_list(self) -> str:
        """Human-readable listing of every command"""
        lines = []
        for spec in COMMAND_SPECS.values():
            lines.append(f"{spec.name}: {spec.description}")
            for arg in spec.fields:
                detail = "required" if arg.required else "optional"
                if arg.default is not None:
                    detail += f", default {json.dumps(arg.default)}"
                if arg.choices:
                    detail += f", one of {'|'.join(arg.choices)}"
                lines.append(f"  {arg.name} ({arg.kind.value}, {detail})")
        return "\n".join(lines)
