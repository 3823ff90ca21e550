"""
Tests for the language model client.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from feedlens.utils.error_handling import LLMError
from feedlens.utils.llm_client import LLMClient


def mock_openai(content="Hello"):
    """Build an AsyncOpenAI stand-in returning one choice."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = content

    mock_client = MagicMock()
    mock_client.chat.completions.create = AsyncMock(return_value=mock_response)
    return mock_client


@pytest.mark.asyncio
async def test_complete_sends_single_user_message(config):
    config.llm_model = "test-model"
    mock_client = mock_openai('{"theme": "x"}')
    llm = LLMClient(config, client=mock_client)

    text = await llm.complete("Analyze this", max_tokens=150)

    assert text == '{"theme": "x"}'
    kwargs = mock_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"] == [{"role": "user", "content": "Analyze this"}]
    assert kwargs["max_tokens"] == 150


@pytest.mark.asyncio
async def test_complete_empty_content(config):
    llm = LLMClient(config, client=mock_openai(None))

    assert await llm.complete("prompt", max_tokens=10) == ""


@pytest.mark.asyncio
async def test_complete_wraps_client_errors(config):
    mock_client = mock_openai()
    mock_client.chat.completions.create.side_effect = RuntimeError("connection reset")
    llm = LLMClient(config, client=mock_client)

    with pytest.raises(LLMError) as exc_info:
        await llm.complete("prompt", max_tokens=10)

    assert "connection reset" in exc_info.value.message
    assert exc_info.value.status_code == 502
