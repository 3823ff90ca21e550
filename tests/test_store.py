"""
Tests for the Feedback Store.
"""

from feedlens.feedback.models import FeedbackAnalysis


def test_create_assigns_id_and_leaves_analysis_empty(store):
    item = store.create("Checkout is slow", "reddit")

    assert item.id is not None
    assert item.message == "Checkout is slow"
    assert item.source == "reddit"
    assert item.created_at is not None
    assert not item.is_analyzed
    assert item.theme is None and item.summary is None


def test_list_feedback_most_recent_first(store):
    first = store.create("one", "email")
    second = store.create("two", "twitter")
    third = store.create("three", "reddit")

    ids = [item.id for item in store.list_feedback()]

    assert ids == [third.id, second.id, first.id]


def test_list_analyzed_and_unanalyzed(seeded_store):
    analyzed = seeded_store.list_analyzed()
    unanalyzed = seeded_store.list_unanalyzed()

    assert [item.theme for item in analyzed] == ["dark mode", "login crash"]
    assert [item.message for item in unanalyzed] == ["Export to CSV would be nice"]


def test_list_analyzed_limit_keeps_most_recent(store, make_analyzed):
    for i in range(5):
        make_analyzed(f"message {i}", "email", f"theme {i}", "neutral", "low", f"summary {i}")

    rows = store.list_analyzed(limit=2)

    assert [row.theme for row in rows] == ["theme 4", "theme 3"]


def test_get_missing_returns_none(store):
    assert store.get(12345) is None


def test_apply_analysis_writes_all_fields(store):
    item = store.create("App crashes on login", "email")

    updated = store.apply_analysis(item.id, FeedbackAnalysis(
        theme="login crash", sentiment="negative", urgency="high", summary="Login causes crash"
    ))

    row = store.get(item.id)
    assert updated is True
    assert (row.theme, row.sentiment, row.urgency, row.summary) == (
        "login crash", "negative", "high", "Login causes crash"
    )
    assert row.message == "App crashes on login"
    assert row.created_at == item.created_at


def test_apply_analysis_unknown_id(store):
    updated = store.apply_analysis(999, FeedbackAnalysis(
        theme="x", sentiment="neutral", urgency="low", summary="s"
    ))

    assert updated is False
    assert store.list_feedback() == []
