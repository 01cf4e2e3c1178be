"""
Utility helpers for the Supadata Command Dispatcher
"""

from supadata_mcp.utils.component_factory import create_client, create_dispatcher

__all__ = ['create_client', 'create_dispatcher']
