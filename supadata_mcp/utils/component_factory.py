"""
Component Factory for the Supadata Command Dispatcher

Builds the remote client, retry policy and dispatcher from configuration.
"""

from typing import Any, Dict, Optional

from supadata_mcp.client.supadata_client import SupadataClient
from supadata_mcp.core.base import RemoteOperationClient
from supadata_mcp.core.config import RetryConfig
from supadata_mcp.core.dispatcher import CommandDispatcher
from supadata_mcp.core.logging import get_logger
from supadata_mcp.core.retry import RetryPolicy


def create_client(config: Dict[str, Any]) -> SupadataClient:
    """
    Create the Supadata client

    Args:
        config: Configuration dictionary with an ``api`` section
    """
    return SupadataClient(config)


def create_dispatcher(config: Dict[str, Any],
                      client: Optional[RemoteOperationClient] = None) -> CommandDispatcher:
    """
    Create a dispatcher wired to a client and a retry policy

    Args:
        config: Configuration dictionary (``api`` and ``retry`` sections)
        client: Remote client to use instead of a new SupadataClient

    Returns:
        Ready to use dispatcher; the caller owns the client lifecycle
    """
    logger = get_logger()

    retry_data = config.get('retry', {})
    retry_config = RetryConfig(
        max_attempts=retry_data.get('max_attempts', 3),
        initial_delay_ms=retry_data.get('initial_delay_ms', 1000),
        max_delay_ms=retry_data.get('max_delay_ms', 10000),
        backoff_factor=retry_data.get('backoff_factor', 2)
    )

    if client is None:
        client = create_client(config)

    prefix = config.get('api', {}).get('tool_prefix', 'supadata_')
    logger.debug(
        f"Dispatcher created with retry policy {retry_config} and tool prefix {prefix!r}"
    )

    return CommandDispatcher(
        client=client,
        retry_policy=RetryPolicy(retry_config),
        name_prefix=prefix
    )
