"""
Remote clients for the Supadata Command Dispatcher
"""

from supadata_mcp.client.supadata_client import SupadataClient

__all__ = ['SupadataClient']
