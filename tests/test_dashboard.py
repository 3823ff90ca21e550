"""
Tests for dashboard filtering, stats, rendering and the API client.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from feedlens.dashboard.client import DashboardClient, InsightsResult
from feedlens.dashboard.filters import (
    FeedbackFilters,
    apply_filters,
    compute_dashboard_stats,
)
from feedlens.dashboard.render import render_dashboard
from feedlens.feedback.models import FeedbackItem


@pytest.fixture
def items():
    return [
        FeedbackItem(id=3, message="Export to CSV", source="reddit"),
        FeedbackItem(id=2, message="Love dark mode", source="twitter",
                     theme="dark mode", sentiment="positive", urgency="low", summary="Likes dark mode"),
        FeedbackItem(id=1, message="App crashes on login", source="email",
                     theme="login crash", sentiment="negative", urgency="high", summary="Login crash"),
        FeedbackItem(id=0, message="Billing page 500s", source="email",
                     theme="billing", sentiment="negative", urgency="medium", summary="Billing errors"),
    ]


def test_default_filters_are_identity(items):
    assert apply_filters(items, FeedbackFilters()) == items


def test_filters_are_a_conjunction(items):
    filters = FeedbackFilters(source="email", urgency="high", sentiment="negative")

    assert [item.id for item in apply_filters(items, filters)] == [1]


def test_single_filter_preserves_order(items):
    filters = FeedbackFilters(sentiment="negative")

    assert [item.id for item in apply_filters(items, filters)] == [1, 0]


def test_unanalyzed_rows_hidden_by_analysis_filters(items):
    filters = FeedbackFilters(urgency="low")

    assert [item.id for item in apply_filters(items, filters)] == [2]


def test_compute_dashboard_stats(items):
    stats = compute_dashboard_stats(items)

    assert stats.total == 4
    assert stats.negative == 2
    assert stats.positive == 1
    assert stats.high_urgency == 1
    assert stats.analyzed == 3
    assert stats.sources == ["reddit", "twitter", "email"]


def test_render_dashboard(items):
    html = render_dashboard(items)

    assert "4 items" in html
    assert "⏳ Analyzing..." in html
    assert "login crash" in html
    assert "const pending = [3];" in html
    assert "✨ Get Insights</button>" in html
    assert 'type="submit" disabled' not in html


def test_render_dashboard_disables_insights_without_analysis():
    html = render_dashboard([FeedbackItem(id=1, message="Pending", source="email")])

    assert 'type="submit" disabled' in html


def test_render_dashboard_escapes_messages():
    html = render_dashboard([FeedbackItem(id=1, message="<script>alert(1)</script>", source="email")])

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


def test_render_dashboard_shows_insights_error(items):
    html = render_dashboard(items, insights=InsightsResult(error="No analyzed feedback yet"))

    assert "No analyzed feedback yet" in html
    assert "Sent to Discord" not in html


def test_render_dashboard_keeps_selected_filter(items):
    html = render_dashboard(items, FeedbackFilters(urgency="high"))

    assert '<option value="high" selected>' in html
    assert "Love dark mode" not in html


@pytest.mark.asyncio
async def test_client_backfill_sequential(items):
    client = DashboardClient("http://localhost:8000/")
    analyzed = FeedbackItem(id=3, message="Export to CSV", source="reddit",
                            theme="export", sentiment="neutral", urgency="low", summary="Wants CSV export")
    updates = []

    with patch.object(client, "analyze", AsyncMock(return_value=analyzed)) as analyze:
        result = await client.backfill(items, on_update=updates.append)

    analyze.assert_awaited_once_with(3)
    assert result[0].theme == "export"
    assert [item.id for item in result] == [3, 2, 1, 0]
    assert len(updates) == 1
    assert items[0].theme is None


@pytest.mark.asyncio
async def test_client_backfill_skips_failures(items):
    client = DashboardClient()
    error = aiohttp.ClientResponseError(MagicMock(), (), status=500)

    with patch.object(client, "analyze", AsyncMock(side_effect=error)):
        result = await client.backfill(items)

    assert result == items


@pytest.mark.asyncio
async def test_client_load_feedback():
    mock_response = MagicMock()
    mock_response.raise_for_status = MagicMock()
    mock_response.json = AsyncMock(return_value=[
        {"id": 1, "message": "Hi", "source": "email", "created_at": "2024-01-01T00:00:00",
         "theme": None, "sentiment": None, "urgency": None, "summary": None}
    ])
    mock_response.__aenter__.return_value = mock_response

    mock_session = MagicMock()
    mock_session.get.return_value = mock_response
    mock_session.__aenter__.return_value = mock_session

    with patch("feedlens.dashboard.client.aiohttp.ClientSession", return_value=mock_session):
        rows = await DashboardClient("http://gateway:8000/").load_feedback()

    mock_session.get.assert_called_once_with("http://gateway:8000/api/feedback")
    assert len(rows) == 1
    assert rows[0].message == "Hi"
    assert rows[0].theme is None


def mock_json_response(data, status=200):
    """Build an aiohttp response mock returning data from json()."""
    mock_response = MagicMock()
    mock_response.status = status
    mock_response.raise_for_status = MagicMock()
    mock_response.json = AsyncMock(return_value=data)
    mock_response.__aenter__.return_value = mock_response
    return mock_response


def test_render_dashboard_marks_cards_for_in_place_updates(items):
    html = render_dashboard(items)

    assert 'id="feedback-3"' in html
    assert 'id="stat-negative"' in html
    assert 'id="stat-high-urgency"' in html
    assert 'id="insights-btn"' in html
    assert "location.reload" not in html


def test_render_dashboard_empty_theme_is_not_pending():
    row = FeedbackItem(id=7, message="???", source="email",
                       theme="", sentiment="neutral", urgency="low", summary="unclear")

    html = render_dashboard([row])

    assert "const pending = [];" in html
    assert "Analyzing..." not in html


@pytest.mark.asyncio
async def test_client_analyze_posts_id():
    mock_session = MagicMock()
    mock_session.post.return_value = mock_json_response({
        "id": 4, "message": "App crashes on login", "source": "email",
        "created_at": "2024-01-01T00:00:00", "theme": "login crash",
        "sentiment": "negative", "urgency": "high", "summary": "Login causes crash",
    })
    mock_session.__aenter__.return_value = mock_session

    with patch("feedlens.dashboard.client.aiohttp.ClientSession", return_value=mock_session):
        item = await DashboardClient("http://gateway:8000").analyze(4)

    mock_session.post.assert_called_once_with("http://gateway:8000/api/analyze", json={"id": 4})
    assert item.id == 4
    assert item.theme == "login crash"


@pytest.mark.asyncio
async def test_client_get_insights_summary_then_digest():
    mock_session = MagicMock()
    mock_session.post.side_effect = [
        mock_json_response({"summary": "Fix login first."}),
        mock_json_response({"message": "Digest workflow started", "id": "abc123"}),
    ]
    mock_session.__aenter__.return_value = mock_session

    with patch("feedlens.dashboard.client.aiohttp.ClientSession", return_value=mock_session):
        result = await DashboardClient("http://gateway:8000").get_insights()

    urls = [call.args[0] for call in mock_session.post.call_args_list]
    assert urls == ["http://gateway:8000/api/summary", "http://gateway:8000/api/send-digest"]
    assert result.summary == "Fix login first."
    assert result.error is None
    assert result.digest_id == "abc123"
    assert result.sent_to_discord is True
    assert result.text == "Fix login first."


@pytest.mark.asyncio
async def test_client_get_insights_summary_error_still_sends_digest():
    mock_session = MagicMock()
    mock_session.post.side_effect = [
        mock_json_response({"error": "No analyzed feedback yet"}, status=400),
        mock_json_response({"message": "Digest workflow started", "id": "abc123"}),
    ]
    mock_session.__aenter__.return_value = mock_session

    with patch("feedlens.dashboard.client.aiohttp.ClientSession", return_value=mock_session):
        result = await DashboardClient("http://gateway:8000").get_insights()

    assert mock_session.post.call_count == 2
    assert result.summary is None
    assert result.error == "No analyzed feedback yet"
    assert result.text == "No analyzed feedback yet"
    assert result.sent_to_discord is True
