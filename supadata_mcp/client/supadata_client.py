"""
Supadata API Client

aiohttp implementation of the remote operation interface. Web scraping,
site mapping, crawling and transcript extraction run on the Supadata
side; this client only issues the requests and shapes the replies.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp

from supadata_mcp import __version__
from supadata_mcp.core.base import (
    ConfigurationError,
    Immediate,
    JobStarted,
    RemoteError,
    RemoteOperationClient,
)
from supadata_mcp.core.config import DEFAULT_API_URL
from supadata_mcp.core.logging import get_logger


class SupadataClient(RemoteOperationClient):
    """
    Remote operation client for the Supadata REST API
    """

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.logger = get_logger()

        api_config = config.get('api', {})
        self.api_key: Optional[str] = api_config.get('api_key')
        self.base_url = api_config.get('base_url', DEFAULT_API_URL).rstrip('/')
        self.timeout = api_config.get('timeout', 60)

        self.session: Optional[aiohttp.ClientSession] = None

    async def initialize(self) -> None:
        """Open the HTTP session"""
        if not self.api_key:
            raise ConfigurationError("No API key provided")

        headers = {
            'User-Agent': f'supadata-mcp/{__version__}',
            'Accept': 'application/json',
            'x-api-key': self.api_key,
        }
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers=headers
        )

        self._initialized = True
        self.logger.debug(f"Supadata client ready for {self.base_url}")

    async def cleanup(self) -> None:
        """Close the HTTP session"""
        if self.session:
            await self.session.close()
            self.session = None
        self._initialized = False

    async def scrape(self, url: str, no_links: bool = False, lang: str = "en") -> Any:
        _, payload = await self._request('GET', '/web/scrape', params={
            'url': url,
            'noLinks': _flag(no_links),
            'lang': lang,
        })
        return Immediate(payload)

    async def map(self, url: str) -> Any:
        _, payload = await self._request('GET', '/web/map', params={'url': url})
        if isinstance(payload, dict) and 'urls' in payload:
            payload = payload['urls']
        return Immediate(payload)

    async def crawl(self, url: str, limit: int) -> Any:
        _, payload = await self._request('POST', '/web/crawl', json={'url': url, 'limit': limit})
        job_id = _job_id(payload)
        if job_id is None:
            raise RemoteError(f"Crawl for {url} did not return a job ID")
        return JobStarted(job_id)

    async def get_crawl_result(self, job_id: str) -> Any:
        _, payload = await self._request('GET', f"/web/crawl/{quote(job_id, safe='')}")
        return Immediate(payload)

    async def transcript(self, url: str, lang: Optional[str] = None, text: bool = False,
                         chunk_size: Optional[int] = None, mode: Optional[str] = None) -> Any:
        params = {'url': url, 'text': _flag(text)}
        if lang:
            params['lang'] = lang
        if chunk_size:
            params['chunkSize'] = str(chunk_size)
        if mode:
            params['mode'] = mode

        status, payload = await self._request('GET', '/transcript', params=params)

        job_id = _job_id(payload)
        if status == 202 or (job_id is not None and 'content' not in payload):
            if job_id is None:
                raise RemoteError(f"Transcript job for {url} did not return a job ID")
            return JobStarted(job_id)
        return Immediate(payload)

    async def get_transcript_result(self, job_id: str) -> Any:
        _, payload = await self._request('GET', f"/transcript/{quote(job_id, safe='')}")
        return Immediate(payload)

    async def _request(self, method: str, path: str, params: Optional[Dict[str, str]] = None,
                       json: Optional[Dict[str, Any]] = None):
        """
        Issue a request and decode the reply

        Returns:
            Tuple of HTTP status and decoded body (JSON, or text when the
            body is not JSON)

        Raises:
            RemoteError: On a non-2xx status or a network failure
        """
        if not self.session:
            await self.initialize()

        url = f"{self.base_url}{path}"
        self.logger.debug(f"{method} {url} params={params} body={json}")

        try:
            async with self.session.request(method, url, params=params, json=json) as response:
                if response.content_type == 'application/json':
                    body = await response.json()
                else:
                    body = await response.text()

                if response.status >= 400:
                    raise RemoteError(_error_message(response.status, body), status=response.status)

                return response.status, body
        except aiohttp.ClientError as e:
            raise RemoteError(f"Network error: {str(e)}")


def _flag(value: bool) -> str:
    return 'true' if value else 'false'


def _job_id(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        job_id = payload.get('jobId') or payload.get('id')
        if job_id:
            return str(job_id)
    return None


def _error_message(status: int, body: Any) -> str:
    detail = ""
    if isinstance(body, dict):
        detail = body.get('message') or body.get('details') or body.get('error') or ""
    elif isinstance(body, str):
        detail = body.strip()

    message = f"Supadata API error {status}"
    if status == 429:
        message += ": rate limit exceeded"
        if detail:
            message += f" ({detail})"
    elif detail:
        message += f": {detail}"
    return message
