"""
Core components for the Supadata Command Dispatcher

This package contains:
- Data model, interfaces and errors
- Configuration management
- Logging system
- Command table, retry policy, normalizer and dispatcher
"""

from supadata_mcp.core.base import (
    JobKind,
    Command,
    JobHandle,
    Immediate,
    JobStarted,
    RemoteResult,
    TextContent,
    ResultEnvelope,
    RetryState,
    BaseComponent,
    RemoteOperationClient,
    SupadataError,
    ConfigurationError,
    ValidationError,
    UnknownCommandError,
    MissingArgumentsError,
    RemoteError
)

from supadata_mcp.core.config import (
    ConfigManager,
    ApiConfig,
    RetryConfig,
    LoggingConfig
)

from supadata_mcp.core.logging import (
    LoggingManager,
    get_logger,
    setup_logging
)

from supadata_mcp.core.commands import (
    ArgumentField,
    CommandSpec,
    FieldKind,
    ResponseStyle,
    COMMAND_SPECS,
    COMMAND_NAMES,
    resolve_command,
    validate_arguments
)

from supadata_mcp.core.retry import (
    RetryPolicy,
    is_transient
)

from supadata_mcp.core.normalizer import (
    NormalizationContext,
    ResponseNormalizer
)

from supadata_mcp.core.dispatcher import (
    CommandDispatcher
)

__all__ = [
    # Base classes
    'JobKind',
    'Command',
    'JobHandle',
    'Immediate',
    'JobStarted',
    'RemoteResult',
    'TextContent',
    'ResultEnvelope',
    'RetryState',
    'BaseComponent',
    'RemoteOperationClient',
    'SupadataError',
    'ConfigurationError',
    'ValidationError',
    'UnknownCommandError',
    'MissingArgumentsError',
    'RemoteError',

    # Configuration
    'ConfigManager',
    'ApiConfig',
    'RetryConfig',
    'LoggingConfig',

    # Logging
    'LoggingManager',
    'get_logger',
    'setup_logging',

    # Commands
    'ArgumentField',
    'CommandSpec',
    'FieldKind',
    'ResponseStyle',
    'COMMAND_SPECS',
    'COMMAND_NAMES',
    'resolve_command',
    'validate_arguments',

    # Retry
    'RetryPolicy',
    'is_transient',

    # Normalizer
    'NormalizationContext',
    'ResponseNormalizer',

    # Dispatcher
    'CommandDispatcher'
]
