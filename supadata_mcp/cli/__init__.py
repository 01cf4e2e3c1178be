"""
Command Line Interface for the Supadata Command Dispatcher

Classes:
    CLIManager: Command line interface manager
"""

from supadata_mcp.cli.arguments import CLIManager

__all__ = ['CLIManager']
