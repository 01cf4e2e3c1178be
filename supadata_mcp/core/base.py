"""
Base Classes and Interfaces for the Supadata Command Dispatcher

Defines the data model shared by the dispatcher, the remote client
interface and the exception hierarchy.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from dataclasses import dataclass
from enum import Enum


class JobKind(Enum):
    """Kinds of asynchronous remote jobs"""
    CRAWL = "crawl"
    TRANSCRIPT = "transcript"

    @property
    def status_command(self) -> str:
        """Command used to poll a job of this kind"""
        return f"check_{self.value}_status"


@dataclass(frozen=True)
class Command:
    """A named request with its argument bag"""
    name: str
    args: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class JobHandle:
    """Identifier of remote work in progress"""
    job_id: str
    kind: JobKind

    def describe(self, subject_url: str) -> str:
        return (
            f"Started {self.kind.value} job for {subject_url} with job ID: {self.job_id}. "
            f"Use {self.kind.status_command} to check progress."
        )


@dataclass(frozen=True)
class Immediate:
    """Remote result available right away"""
    content: Any


@dataclass(frozen=True)
class JobStarted:
    """Remote result that only carries a job identifier"""
    job_id: str


class RemoteResult:
    """Tagged variant over Immediate and JobStarted"""

    VARIANTS = (Immediate, JobStarted)

    @staticmethod
    def from_raw(raw: Any, detect_jobs: bool = True) -> Union[Immediate, JobStarted]:
        """
        Convert a raw client value into a result variant

        Args:
            raw: Value returned by the remote client
            detect_jobs: Treat mappings carrying a ``jobId`` as started jobs

        Returns:
            Immediate or JobStarted
        """
        if isinstance(raw, RemoteResult.VARIANTS):
            return raw
        if detect_jobs and isinstance(raw, Mapping) and 'jobId' in raw:
            return JobStarted(job_id=str(raw['jobId']))
        return Immediate(content=raw)


@dataclass(frozen=True)
class TextContent:
    """Single text entry of a reply envelope"""
    text: str
    type: str = "text"

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.type, 'text': self.text}


@dataclass(frozen=True)
class ResultEnvelope:
    """Uniform reply returned for every dispatched command"""
    content: Tuple[TextContent, ...]
    is_error: bool = False

    @classmethod
    def text(cls, text: str) -> 'ResultEnvelope':
        return cls(content=(TextContent(text=text),), is_error=False)

    @classmethod
    def error(cls, message: str) -> 'ResultEnvelope':
        return cls(content=(TextContent(text=message),), is_error=True)

    @property
    def first_text(self) -> str:
        return self.content[0].text if self.content else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'content': [entry.to_dict() for entry in self.content],
            'isError': self.is_error,
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


@dataclass
class RetryState:
    """Attempt bookkeeping for a single retried call"""
    attempt: int = 1
    last_delay_ms: int = 0


class BaseComponent(ABC):
    """Base class for components with an async lifecycle"""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self._initialized = False

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the component"""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Clean up resources"""
        pass

    def is_initialized(self) -> bool:
        """Check if component is initialized"""
        return self._initialized

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.cleanup()


class RemoteOperationClient(BaseComponent):
    """Interface for the remote content-extraction service"""

    @abstractmethod
    async def scrape(self, url: str, no_links: bool = False, lang: str = "en") -> Any:
        """Extract a single page as Markdown"""
        pass

    @abstractmethod
    async def map(self, url: str) -> Any:
        """List the URLs found on a website"""
        pass

    @abstractmethod
    async def crawl(self, url: str, limit: int) -> Any:
        """Start a crawl job"""
        pass

    @abstractmethod
    async def get_crawl_result(self, job_id: str) -> Any:
        """Fetch status and results of a crawl job"""
        pass

    @abstractmethod
    async def transcript(self, url: str, lang: Optional[str] = None, text: bool = False,
                         chunk_size: Optional[int] = None, mode: Optional[str] = None) -> Any:
        """Extract a transcript, immediately or as a job"""
        pass

    @abstractmethod
    async def get_transcript_result(self, job_id: str) -> Any:
        """Fetch status and results of a transcript job"""
        pass


class SupadataError(Exception):
    """Base exception for dispatcher errors"""
    pass


class ConfigurationError(SupadataError):
    """Configuration-related errors"""
    pass


class ValidationError(SupadataError):
    """Command lookup or argument validation errors"""
    pass


class UnknownCommandError(ValidationError):
    """No command registered under the requested name"""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class MissingArgumentsError(ValidationError):
    """Command issued without an argument bag"""

    def __init__(self):
        super().__init__("No arguments provided")


class RemoteError(SupadataError):
    """Failure reported by the remote service"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
