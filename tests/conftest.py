"""
Shared fixtures for Feedlens tests.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from tenacity import wait_none

from feedlens.config import Settings
from feedlens.feedback.models import FeedbackAnalysis
from feedlens.services import FeedlensServices
from feedlens.utils.database import close_db
from feedlens.utils.llm_client import LLMClient


@pytest.fixture
def config(tmp_path):
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'feedlens.db'}",
        openai_api_key="test-key",
        discord_webhook_url=None,
        enable_scheduler=False,
        workflow_step_retries=2,
        strict_analysis_validation=True,
    )


@pytest.fixture
def llm():
    """Language model client whose completions are set per test."""
    client = MagicMock(spec=LLMClient)
    client.complete = AsyncMock(return_value="")
    return client


@pytest.fixture
def services(config, llm):
    """Fully wired components with a mocked model."""
    services = FeedlensServices(config, llm=llm)
    services.runtime.wait = wait_none()
    yield services
    close_db()


@pytest.fixture
def store(services):
    return services.store


def add_analyzed(store, message, source, theme, sentiment, urgency, summary):
    """Insert a row and give it an analysis."""
    item = store.create(message, source)
    store.apply_analysis(item.id, FeedbackAnalysis(
        theme=theme, sentiment=sentiment, urgency=urgency, summary=summary
    ))
    return store.get(item.id)


@pytest.fixture
def seeded_store(store):
    """Two analyzed rows and one unanalyzed row."""
    add_analyzed(store, "App crashes on login", "email",
                 "login crash", "negative", "high", "Login causes crash")
    add_analyzed(store, "Love the new dark mode", "twitter",
                 "dark mode", "positive", "low", "User likes dark mode")
    store.create("Export to CSV would be nice", "reddit")
    return store


@pytest.fixture
def make_analyzed(store):
    """Factory inserting analyzed rows into the test store."""
    def _make(message, source, theme, sentiment, urgency, summary):
        return add_analyzed(store, message, source, theme, sentiment, urgency, summary)
    return _make
