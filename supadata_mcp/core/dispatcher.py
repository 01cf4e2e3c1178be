"""
Command Dispatcher

Validates an incoming command, routes it to the bound remote operation
(through the retry policy where the command allows it) and returns a
reply envelope. Failures never escape ``dispatch``; they become error
envelopes carrying the failure's message unchanged.
"""

import time
from typing import Any, Mapping, Optional

from supadata_mcp.core.base import (
    Command,
    MissingArgumentsError,
    RemoteOperationClient,
    RemoteResult,
    ResultEnvelope,
    ValidationError,
)
from supadata_mcp.core.commands import ResponseStyle, resolve_command, validate_arguments
from supadata_mcp.core.logging import get_logger, logging_manager
from supadata_mcp.core.normalizer import NormalizationContext, ResponseNormalizer
from supadata_mcp.core.retry import RetryPolicy


def error_message(error: BaseException) -> str:
    """Human-readable message of a failure, as raised"""
    return str(error) or error.__class__.__name__


class CommandDispatcher:
    """
    Routes named commands to the remote client

    Holds no per-command state, so concurrent ``dispatch`` calls do not
    interact.
    """

    def __init__(self, client: RemoteOperationClient,
                 retry_policy: Optional[RetryPolicy] = None,
                 normalizer: Optional[ResponseNormalizer] = None,
                 name_prefix: str = "supadata_"):
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy()
        self.normalizer = normalizer or ResponseNormalizer()
        self.name_prefix = name_prefix
        self.logger = get_logger()

    async def dispatch(self, name: str, args: Optional[Mapping[str, Any]] = None) -> ResultEnvelope:
        """
        Execute one command

        Args:
            name: Command name, bare or carrying the tool prefix
            args: Argument bag

        Returns:
            Reply envelope; ``is_error`` is set on any failure
        """
        started = time.monotonic()

        try:
            logging_manager.log_command_received(str(name), args if isinstance(args, Mapping) else None)
            envelope = await self._execute(name, args)
        except ValidationError as e:
            self.logger.warning(f"Rejected command {name}: {error_message(e)}")
            envelope = ResultEnvelope.error(error_message(e))
        except Exception as e:
            self.logger.error(f"Command {name} failed: {error_message(e)}")
            envelope = ResultEnvelope.error(error_message(e))

        duration_ms = (time.monotonic() - started) * 1000
        logging_manager.log_command_completed(str(name), duration_ms, envelope.is_error)
        return envelope

    async def dispatch_command(self, command: Command) -> ResultEnvelope:
        """Execute a Command value"""
        return await self.dispatch(command.name, command.args)

    async def _execute(self, name: str, args: Optional[Mapping[str, Any]]) -> ResultEnvelope:
        spec = resolve_command(name, self.name_prefix)

        if not args and spec.required_fields:
            raise MissingArgumentsError()

        try:
            validated = validate_arguments(spec, args or {})
        except ValidationError as e:
            logging_manager.log_warning(f"Invalid arguments for {spec.name}", {'reason': str(e)})
            raise ValidationError(f"Invalid arguments for {spec.name}") from e

        def operation():
            return spec.operation(self.client, validated)

        if spec.retryable:
            raw = await self.retry_policy.run(operation, f"{spec.name} operation")
        else:
            raw = await operation()

        result = RemoteResult.from_raw(raw, detect_jobs=spec.response_style is ResponseStyle.JOB)
        context = NormalizationContext.for_command(spec, validated)
        return self.normalizer.normalize(result, context)
