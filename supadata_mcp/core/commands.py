"""
Command Table

Static, read-only description of every command: its argument schema,
the remote operation it is bound to and whether the call is retried.
"""

from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple
from dataclasses import dataclass
from enum import Enum

import validators

from supadata_mcp.core.base import (
    JobKind,
    RemoteOperationClient,
    UnknownCommandError,
    ValidationError,
)


CRAWL_DEFAULT_LIMIT = 100
CRAWL_MIN_LIMIT = 1
CRAWL_MAX_LIMIT = 5000
TRANSCRIPT_MODES = ('native', 'auto', 'generate')

_MISSING = object()


class FieldKind(Enum):
    """Accepted argument value kinds"""
    URL = "url"
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    CHOICE = "choice"


class ResponseStyle(Enum):
    """How a command's remote result is rendered"""
    CONTENT = "content"
    URL_LIST = "url_list"
    JOB = "job"
    STATUS = "status"


@dataclass(frozen=True)
class ArgumentField:
    """Schema entry for a single command argument"""
    name: str
    kind: FieldKind
    required: bool = False
    default: Any = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    choices: Tuple[str, ...] = ()
    clamp: bool = False
    description: str = ""

    def coerce(self, value: Any) -> Any:
        """Check ``value`` against this field and return the accepted value"""
        if self.kind is FieldKind.URL:
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{self.name} must be a valid URL")
            value = value.strip()
            # accepts simple hosts such as localhost and raw spaces in the path
            if not validators.url(value.replace(" ", "%20"), simple_host=True):
                raise ValidationError(f"{self.name} must be a valid URL")
            return value

        if self.kind is FieldKind.STRING:
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{self.name} must be a non-empty string")
            return value.strip()

        if self.kind is FieldKind.BOOLEAN:
            if not isinstance(value, bool):
                raise ValidationError(f"{self.name} must be a boolean")
            return value

        if self.kind is FieldKind.CHOICE:
            if value not in self.choices:
                raise ValidationError(f"{self.name} must be one of {', '.join(self.choices)}")
            return value

        # FieldKind.INTEGER
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"{self.name} must be a number")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValidationError(f"{self.name} must be a whole number")
            value = int(value)

        if self.clamp:
            if self.minimum is not None:
                value = max(value, self.minimum)
            if self.maximum is not None:
                value = min(value, self.maximum)
        elif (self.minimum is not None and value < self.minimum) or \
                (self.maximum is not None and value > self.maximum):
            raise ValidationError(f"{self.name} must be between {self.minimum} and {self.maximum}")

        return value


Operation = Callable[[RemoteOperationClient, Dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class CommandSpec:
    """Static metadata of one command"""
    name: str
    description: str
    fields: Tuple[ArgumentField, ...]
    operation: Operation
    response_style: ResponseStyle
    retryable: bool = False
    job_kind: Optional[JobKind] = None
    subject_field: str = "url"

    @property
    def required_fields(self) -> Tuple[ArgumentField, ...]:
        return tuple(f for f in self.fields if f.required)

    def describe(self) -> Dict[str, Any]:
        """Schema summary used for listings"""
        return {
            'name': self.name,
            'description': self.description,
            'retryable': self.retryable,
            'arguments': [
                {
                    'name': f.name,
                    'type': f.kind.value,
                    'required': f.required,
                    **({'default': f.default} if f.default is not None else {}),
                    **({'choices': list(f.choices)} if f.choices else {}),
                }
                for f in self.fields
            ],
        }


def _scrape(client: RemoteOperationClient, args: Dict[str, Any]) -> Awaitable[Any]:
    return client.scrape(args['url'], no_links=args['noLinks'], lang=args['lang'])


def _map(client: RemoteOperationClient, args: Dict[str, Any]) -> Awaitable[Any]:
    return client.map(args['url'])


def _crawl(client: RemoteOperationClient, args: Dict[str, Any]) -> Awaitable[Any]:
    return client.crawl(args['url'], limit=args['limit'])


def _check_crawl_status(client: RemoteOperationClient, args: Dict[str, Any]) -> Awaitable[Any]:
    return client.get_crawl_result(args['id'])


def _transcript(client: RemoteOperationClient, args: Dict[str, Any]) -> Awaitable[Any]:
    return client.transcript(
        args['url'],
        lang=args.get('lang'),
        text=args['text'],
        chunk_size=args.get('chunkSize'),
        mode=args.get('mode'),
    )


def _check_transcript_status(client: RemoteOperationClient, args: Dict[str, Any]) -> Awaitable[Any]:
    return client.get_transcript_result(args['id'])


_SPECS = (
    CommandSpec(
        name="scrape",
        description="Extract content from a web page as Markdown",
        fields=(
            ArgumentField("url", FieldKind.URL, required=True, description="Web page URL to scrape"),
            ArgumentField("noLinks", FieldKind.BOOLEAN, default=False,
                          description="Remove Markdown links from the content"),
            ArgumentField("lang", FieldKind.STRING, default="en",
                          description="Preferred language (ISO 639-1)"),
        ),
        operation=_scrape,
        response_style=ResponseStyle.CONTENT,
    ),
    CommandSpec(
        name="map",
        description="List all URLs found on a website",
        fields=(
            ArgumentField("url", FieldKind.URL, required=True, description="URL of the website to map"),
        ),
        operation=_map,
        response_style=ResponseStyle.URL_LIST,
    ),
    CommandSpec(
        name="crawl",
        description="Start a crawl job over a website",
        fields=(
            ArgumentField("url", FieldKind.URL, required=True, description="URL of the webpage to crawl"),
            ArgumentField("limit", FieldKind.INTEGER, default=CRAWL_DEFAULT_LIMIT,
                          minimum=CRAWL_MIN_LIMIT, maximum=CRAWL_MAX_LIMIT, clamp=True,
                          description="Maximum number of pages to crawl"),
        ),
        operation=_crawl,
        response_style=ResponseStyle.JOB,
        retryable=True,
        job_kind=JobKind.CRAWL,
    ),
    CommandSpec(
        name="check_crawl_status",
        description="Check status and results of a crawl job",
        fields=(
            ArgumentField("id", FieldKind.STRING, required=True, description="Crawl job ID"),
        ),
        operation=_check_crawl_status,
        response_style=ResponseStyle.STATUS,
        job_kind=JobKind.CRAWL,
        subject_field="id",
    ),
    CommandSpec(
        name="transcript",
        description="Extract a transcript from a video or file URL",
        fields=(
            ArgumentField("url", FieldKind.URL, required=True,
                          description="Video or file URL (YouTube, TikTok, Instagram, Twitter, file)"),
            ArgumentField("lang", FieldKind.STRING, description="Preferred language (ISO 639-1)"),
            ArgumentField("text", FieldKind.BOOLEAN, default=False,
                          description="Return plain text instead of timed chunks"),
            ArgumentField("chunkSize", FieldKind.INTEGER, minimum=1,
                          description="Maximum characters per transcript chunk"),
            ArgumentField("mode", FieldKind.CHOICE, choices=TRANSCRIPT_MODES,
                          description="Transcript generation mode"),
        ),
        operation=_transcript,
        response_style=ResponseStyle.JOB,
        job_kind=JobKind.TRANSCRIPT,
    ),
    CommandSpec(
        name="check_transcript_status",
        description="Check status and results of a transcript job",
        fields=(
            ArgumentField("id", FieldKind.STRING, required=True, description="Transcript job ID"),
        ),
        operation=_check_transcript_status,
        response_style=ResponseStyle.STATUS,
        job_kind=JobKind.TRANSCRIPT,
        subject_field="id",
    ),
)


def _build_table() -> Mapping[str, CommandSpec]:
    table: Dict[str, CommandSpec] = {}
    for spec in _SPECS:
        if spec.name in table:
            raise ValueError(f"Duplicate command name: {spec.name}")
        table[spec.name] = spec
    return MappingProxyType(table)


COMMAND_SPECS: Mapping[str, CommandSpec] = _build_table()

COMMAND_NAMES = tuple(COMMAND_SPECS)


def resolve_command(name: Any, prefix: str = "") -> CommandSpec:
    """
    Look up a command by bare or prefixed name

    Raises:
        UnknownCommandError: If no command matches
    """
    if isinstance(name, str):
        if name in COMMAND_SPECS:
            return COMMAND_SPECS[name]
        if prefix and name.startswith(prefix) and name[len(prefix):] in COMMAND_SPECS:
            return COMMAND_SPECS[name[len(prefix):]]
    raise UnknownCommandError(str(name))


def validate_arguments(spec: CommandSpec, args: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate ``args`` against the command schema and apply defaults

    Optional fields without a default are only included when the caller
    set them. Unknown keys are dropped.

    Raises:
        ValidationError: On a missing required field or a value of the wrong shape
    """
    if not isinstance(args, Mapping):
        raise ValidationError("arguments must be a mapping")

    validated: Dict[str, Any] = {}
    for arg in spec.fields:
        value = args.get(arg.name, _MISSING)
        if value is _MISSING or value is None:
            if arg.required:
                raise ValidationError(f"missing required argument: {arg.name}")
            if arg.default is not None:
                validated[arg.name] = arg.default
            continue
        validated[arg.name] = arg.coerce(value)

    return validated
