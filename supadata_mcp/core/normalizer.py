"""
Response Normalizer

Turns a remote result into the uniform reply envelope. Pure: the same
input always yields an equal envelope.
"""

import json
from typing import Any, Optional, Union
from dataclasses import dataclass

from supadata_mcp.core.base import (
    Immediate,
    JobHandle,
    JobKind,
    JobStarted,
    ResultEnvelope,
)
from supadata_mcp.core.commands import CommandSpec, ResponseStyle


@dataclass(frozen=True)
class NormalizationContext:
    """What the normalizer needs to know about the originating command"""
    command: str
    response_style: ResponseStyle
    subject_url: str = ""
    job_kind: Optional[JobKind] = None

    @classmethod
    def for_command(cls, spec: CommandSpec, args: dict) -> 'NormalizationContext':
        return cls(
            command=spec.name,
            response_style=spec.response_style,
            subject_url=str(args.get(spec.subject_field, "")),
            job_kind=spec.job_kind,
        )


def serialize(value: Any) -> str:
    """Stable, indented textual form of a structured value"""
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


class ResponseNormalizer:
    """
    Converts Immediate/JobStarted results into reply envelopes
    """

    def normalize(self, result: Union[Immediate, JobStarted],
                  context: NormalizationContext) -> ResultEnvelope:
        if context.response_style is ResponseStyle.STATUS:
            payload = result.content if isinstance(result, Immediate) else {'jobId': result.job_id}
            return ResultEnvelope.text(serialize(payload).strip())

        if isinstance(result, JobStarted):
            if context.job_kind is None:
                return ResultEnvelope.text(serialize({'jobId': result.job_id}).strip())
            return ResultEnvelope.text(self._job_started_text(result, context))

        if isinstance(result, Immediate):
            if context.response_style is ResponseStyle.URL_LIST:
                return ResultEnvelope.text(self._join_urls(result.content))
            return ResultEnvelope.text(self._render_content(result.content))

        raise TypeError(f"Unsupported remote result: {type(result).__name__}")

    def _job_started_text(self, result: JobStarted, context: NormalizationContext) -> str:
        handle = JobHandle(job_id=result.job_id, kind=context.job_kind)
        return handle.describe(context.subject_url).strip()

    def _join_urls(self, content: Any) -> str:
        urls = list(content) if isinstance(content, (list, tuple)) else [content]
        return "\n".join(str(url) for url in urls).strip()

    def _render_content(self, content: Any) -> str:
        if isinstance(content, str):
            return content.strip()
        return serialize(content).strip()
