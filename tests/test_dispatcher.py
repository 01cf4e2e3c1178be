"""
Tests for CommandDispatcher

Tests routing, validation envelopes, retry integration and error
pass-through against a mocked remote client.
"""

import json
import logging

import pytest
from unittest.mock import AsyncMock, patch

from supadata_mcp.core.base import Command, JobStarted, RemoteError, RemoteOperationClient
from supadata_mcp.core.commands import COMMAND_NAMES, CRAWL_DEFAULT_LIMIT
from supadata_mcp.core.config import RetryConfig
from supadata_mcp.core.dispatcher import CommandDispatcher
from supadata_mcp.core.logging import LOGGER_NAME
from supadata_mcp.core.retry import RetryPolicy


@pytest.fixture
def mock_client():
    """Mock remote client"""
    return AsyncMock(spec=RemoteOperationClient)


@pytest.fixture
def dispatcher(mock_client):
    """Dispatcher with the default retry policy"""
    return CommandDispatcher(mock_client, RetryPolicy(RetryConfig()))


class TestDispatchValidation:
    """Validation envelopes"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["unknown_tool", "scrapes", "supadata_nothing", ""])
    async def test_unknown_tool(self, dispatcher, name):
        envelope = await dispatcher.dispatch(name, {"url": "https://example.com"})

        assert envelope.to_dict() == {
            'content': [{'type': 'text', 'text': f"Unknown tool: {name}"}],
            'isError': True,
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", COMMAND_NAMES)
    @pytest.mark.parametrize("args", [None, {}])
    async def test_no_arguments(self, dispatcher, mock_client, name, args):
        envelope = await dispatcher.dispatch(name, args)

        assert envelope.is_error
        assert envelope.first_text == "No arguments provided"
        assert not mock_client.mock_calls

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, dispatcher, mock_client):
        envelope = await dispatcher.dispatch("transcript", {"url": "https://youtube.com/watch?v=x",
                                                            "mode": "fast"})

        assert envelope.is_error
        assert envelope.first_text == "Invalid arguments for transcript"
        mock_client.transcript.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_arguments_uses_bare_name(self, dispatcher):
        envelope = await dispatcher.dispatch("supadata_scrape", {"url": 5})

        assert envelope.first_text == "Invalid arguments for scrape"


class TestDispatchCommands:
    """Routing and normalization per command"""

    @pytest.mark.asyncio
    async def test_scrape(self, dispatcher, mock_client):
        mock_client.scrape.return_value = "# Test Content"

        envelope = await dispatcher.dispatch("scrape", {"url": "https://example.com",
                                                        "formats": ["markdown"]})

        assert envelope.to_dict() == {
            'content': [{'type': 'text', 'text': '# Test Content'}],
            'isError': False,
        }
        mock_client.scrape.assert_awaited_once_with("https://example.com", no_links=False, lang="en")

    @pytest.mark.asyncio
    async def test_scrape_job_id_payload_is_serialized(self, dispatcher, mock_client):
        mock_client.scrape.return_value = {"jobId": "x"}

        envelope = await dispatcher.dispatch("scrape", {"url": "https://example.com"})

        assert not envelope.is_error
        assert json.loads(envelope.first_text) == {"jobId": "x"}
        assert "check_crawl_status" not in envelope.first_text

    @pytest.mark.asyncio
    async def test_non_json_argument_keys(self, dispatcher, mock_client, caplog):
        mock_client.scrape.return_value = "# Test Content"

        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            envelope = await dispatcher.dispatch("scrape", {("a", "b"): 1, "url": "https://example.com"})

        assert envelope.first_text == "# Test Content"
        assert "Arguments for scrape" in caplog.text

    @pytest.mark.asyncio
    async def test_prefixed_name(self, dispatcher, mock_client):
        mock_client.scrape.return_value = "# Test Content"

        envelope = await dispatcher.dispatch("supadata_scrape", {"url": "https://example.com"})

        assert envelope.first_text == "# Test Content"

    @pytest.mark.asyncio
    async def test_map(self, dispatcher, mock_client):
        mock_client.map.return_value = ["https://example.com/page1", "https://example.com/page2"]

        envelope = await dispatcher.dispatch("map", {"url": "https://example.com"})

        assert not envelope.is_error
        assert envelope.first_text == "https://example.com/page1\nhttps://example.com/page2"
        mock_client.map.assert_awaited_once_with("https://example.com")

    @pytest.mark.asyncio
    async def test_map_scalar_result(self, dispatcher, mock_client):
        mock_client.map.return_value = "https://example.com/page1"

        envelope = await dispatcher.dispatch("map", {"url": "https://example.com"})

        assert envelope.first_text == "https://example.com/page1"

    @pytest.mark.asyncio
    async def test_crawl_default_limit(self, dispatcher, mock_client):
        mock_client.crawl.return_value = {"jobId": "test-crawl-id"}

        envelope = await dispatcher.dispatch("crawl", {"url": "https://example.com", "maxDepth": 2})

        assert not envelope.is_error
        assert "test-crawl-id" in envelope.first_text
        assert "check_crawl_status" in envelope.first_text
        mock_client.crawl.assert_awaited_once_with("https://example.com", limit=CRAWL_DEFAULT_LIMIT)

    @pytest.mark.asyncio
    async def test_crawl_limit_clamped(self, dispatcher, mock_client):
        mock_client.crawl.return_value = JobStarted("id")

        await dispatcher.dispatch("crawl", {"url": "https://example.com", "limit": 100000})

        mock_client.crawl.assert_awaited_once_with("https://example.com", limit=5000)

    @pytest.mark.asyncio
    async def test_check_crawl_status(self, dispatcher, mock_client):
        status = {"status": "completed", "data": ["# Page 1 Content", "# Page 2 Content"]}
        mock_client.get_crawl_result.return_value = status

        envelope = await dispatcher.dispatch("check_crawl_status", {"id": "test-crawl-id"})

        assert not envelope.is_error
        assert envelope.first_text == json.dumps(status, indent=2)
        mock_client.get_crawl_result.assert_awaited_once_with("test-crawl-id")

    @pytest.mark.asyncio
    async def test_status_payload_with_job_id_is_not_a_new_job(self, dispatcher, mock_client):
        mock_client.get_transcript_result.return_value = {"jobId": "t-1", "status": "active"}

        envelope = await dispatcher.dispatch("check_transcript_status", {"id": "t-1"})

        assert json.loads(envelope.first_text) == {"jobId": "t-1", "status": "active"}

    @pytest.mark.asyncio
    async def test_transcript_immediate(self, dispatcher, mock_client):
        mock_client.transcript.return_value = "Transcript content here"

        envelope = await dispatcher.dispatch("transcript", {"url": "https://youtube.com/watch?v=example",
                                                            "lang": "en", "text": False})

        assert envelope.to_dict() == {
            'content': [{'type': 'text', 'text': 'Transcript content here'}],
            'isError': False,
        }
        mock_client.transcript.assert_awaited_once_with(
            "https://youtube.com/watch?v=example", lang="en", text=False, chunk_size=None, mode=None
        )

    @pytest.mark.asyncio
    async def test_transcript_job(self, dispatcher, mock_client):
        mock_client.transcript.return_value = {"jobId": "test-transcript-job-id"}

        envelope = await dispatcher.dispatch("transcript", {"url": "https://youtube.com/watch?v=example"})

        assert not envelope.is_error
        assert envelope.first_text == (
            "Started transcript job for https://youtube.com/watch?v=example with job ID: "
            "test-transcript-job-id. Use check_transcript_status to check progress."
        )

    @pytest.mark.asyncio
    async def test_check_transcript_status(self, dispatcher, mock_client):
        mock_client.get_transcript_result.return_value = {"status": "completed",
                                                          "result": "Full transcript content here"}

        envelope = await dispatcher.dispatch("check_transcript_status", {"id": "test-transcript-id"})

        assert "completed" in envelope.first_text
        mock_client.get_transcript_result.assert_awaited_once_with("test-transcript-id")

    @pytest.mark.asyncio
    async def test_dispatch_command(self, dispatcher, mock_client):
        mock_client.map.return_value = ["https://example.com/a"]

        envelope = await dispatcher.dispatch_command(Command("map", {"url": "https://example.com"}))

        assert envelope.first_text == "https://example.com/a"


class TestDispatchErrors:
    """Remote failures and retry behaviour"""

    @pytest.mark.asyncio
    async def test_api_error_passed_through(self, dispatcher, mock_client):
        mock_client.scrape.side_effect = Exception("API Error")

        envelope = await dispatcher.dispatch("scrape", {"url": "https://example.com"})

        assert envelope.to_dict() == {
            'content': [{'type': 'text', 'text': 'API Error'}],
            'isError': True,
        }

    @pytest.mark.asyncio
    async def test_rate_limit_on_non_retryable_command(self, dispatcher, mock_client):
        mock_client.scrape.side_effect = RemoteError("rate limit exceeded")

        with patch('asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
            envelope = await dispatcher.dispatch("scrape", {"url": "https://example.com"})

        assert envelope.is_error
        assert envelope.first_text == "rate limit exceeded"
        assert mock_client.scrape.await_count == 1
        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_crawl_retried_until_success(self, dispatcher, mock_client):
        mock_client.crawl.side_effect = [
            RemoteError("rate limit exceeded"),
            RemoteError("Supadata API error 429: rate limit exceeded"),
            {"jobId": "test-crawl-id"},
        ]

        with patch('asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
            envelope = await dispatcher.dispatch("crawl", {"url": "https://example.com"})

        assert not envelope.is_error
        assert "test-crawl-id" in envelope.first_text
        assert mock_client.crawl.await_count == 3
        assert [c.args[0] for c in mock_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_crawl_retry_exhausted(self, dispatcher, mock_client):
        mock_client.crawl.side_effect = [
            RemoteError("rate limit exceeded (1)"),
            RemoteError("rate limit exceeded (2)"),
            RemoteError("rate limit exceeded (3)"),
        ]

        with patch('asyncio.sleep', new_callable=AsyncMock):
            envelope = await dispatcher.dispatch("crawl", {"url": "https://example.com"})

        assert envelope.is_error
        assert envelope.first_text == "rate limit exceeded (3)"
        assert mock_client.crawl.await_count == 3

    @pytest.mark.asyncio
    async def test_crawl_permanent_failure_short_circuits(self, mock_client):
        dispatcher = CommandDispatcher(mock_client, RetryPolicy(RetryConfig(max_attempts=5)))
        mock_client.crawl.side_effect = RemoteError("Supadata API error 400: invalid url")

        with patch('asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
            envelope = await dispatcher.dispatch("crawl", {"url": "https://example.com"})

        assert envelope.first_text == "Supadata API error 400: invalid url"
        assert mock_client.crawl.await_count == 1
        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_message_uses_class_name(self, dispatcher, mock_client):
        mock_client.map.side_effect = TimeoutError()

        envelope = await dispatcher.dispatch("map", {"url": "https://example.com"})

        assert envelope.is_error
        assert envelope.first_text == "TimeoutError"

    @pytest.mark.asyncio
    async def test_completion_logged(self, dispatcher, mock_client):
        mock_client.map.return_value = []

        with patch('supadata_mcp.core.dispatcher.logging_manager') as mock_logging:
            await dispatcher.dispatch("map", {"url": "https://example.com"})

        mock_logging.log_command_received.assert_called_once()
        name, _, is_error = mock_logging.log_command_completed.call_args[0]
        assert name == "map"
        assert is_error is False
