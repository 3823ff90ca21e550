"""
Server-rendered HTML for the feedback dashboard.
"""

import json
from html import escape
from typing import Optional, Sequence

from feedlens.dashboard.client import InsightsResult
from feedlens.dashboard.filters import ALL, FeedbackFilters, apply_filters, compute_dashboard_stats
from feedlens.feedback.models import FeedbackItem

SOURCE_ICONS = {"email": "✉️", "twitter": "𝕏", "reddit": "💬"}
URGENCY_ICONS = {"high": "🔴", "medium": "🟡", "low": "🟢"}

URGENCY_OPTIONS = [("high", "🔴 High"), ("medium", "🟡 Medium"), ("low", "🟢 Low")]
SENTIMENT_OPTIONS = [("negative", "😞 Negative"), ("positive", "😊 Positive"), ("neutral", "😐 Neutral")]

# Analyze each pending row once per page load and patch its card in place
_BACKFILL_SCRIPT = """
<script>
(async () => {{
  const pending = {pending};
  const bump = (id) => {{
    const el = document.getElementById(id);
    if (el) el.textContent = String(Number(el.textContent) + 1);
  }};
  for (const id of pending) {{
    let item;
    try {{
      const response = await fetch("/api/analyze", {{
        method: "POST",
        headers: {{"Content-Type": "application/json"}},
        body: JSON.stringify({{id}})
      }});
      if (!response.ok) continue;
      item = await response.json();
    }} catch (e) {{
      continue;
    }}
    if (item.sentiment === "negative") bump("stat-negative");
    if (item.sentiment === "positive") bump("stat-positive");
    if (item.urgency === "high") bump("stat-high-urgency");
    document.getElementById("insights-btn").disabled = false;

    const card = document.getElementById(`feedback-${{id}}`);
    if (!card) continue;
    card.classList.remove("analyzing");
    if (item.urgency) {{
      const urgency = document.createElement("span");
      urgency.className = `urgency urgency-${{item.urgency}}`;
      urgency.textContent = item.urgency;
      card.querySelector(".card-meta").appendChild(urgency);
    }}
    const tags = document.createElement("div");
    tags.className = "tags";
    for (const [cls, text] of [[`sentiment-${{item.sentiment}}`, item.sentiment], ["theme", item.theme]]) {{
      const tag = document.createElement("span");
      tag.className = `tag ${{cls}}`;
      tag.textContent = text;
      tags.appendChild(tag);
    }}
    card.querySelector(".analyzing-text").replaceWith(tags);
  }}
}})();
</script>
"""


def _select(name: str, label: str, current: str, options) -> str:
    rendered = [f'<option value="{ALL}">{escape(label)}</option>']
    for value, text in options:
        selected = " selected" if value == current else ""
        rendered.append(f'<option value="{escape(value)}"{selected}>{escape(text)}</option>')
    return f'<select name="{name}" onchange="this.form.submit()">{"".join(rendered)}</select>'


def _card(item: FeedbackItem) -> str:
    source = f"{SOURCE_ICONS.get(item.source, '')} {escape(item.source)}".strip()
    urgency = ""
    if item.urgency:
        urgency = (
            f'<span class="urgency urgency-{escape(item.urgency)}">'
            f'{URGENCY_ICONS.get(item.urgency, "")} {escape(item.urgency)}</span>'
        )

    if item.is_analyzed:
        body = (
            f'<div class="tags"><span class="tag sentiment-{escape(item.sentiment or "")}">'
            f'{escape(item.sentiment or "")}</span>'
            f'<span class="tag theme">{escape(item.theme)}</span></div>'
        )
        css = "feedback-card"
    else:
        body = '<div class="analyzing-text">⏳ Analyzing...</div>'
        css = "feedback-card analyzing"

    return (
        f'<div class="{css}" id="feedback-{item.id}"><div class="card-meta"><span class="source">{source}</span>{urgency}</div>'
        f'<p class="message">{escape(item.message)}</p>{body}</div>'
    )


def render_dashboard(items: Sequence[FeedbackItem],
                     filters: Optional[FeedbackFilters] = None,
                     insights: Optional[InsightsResult] = None) -> str:
    """
    Render the dashboard page.

    Args:
        items: Full feedback list (filters are applied here)
        filters: Active filters
        insights: Result of the last "Get Insights" action, if any

    Returns:
        HTML document
    """
    filters = filters or FeedbackFilters()
    stats = compute_dashboard_stats(items)
    visible = apply_filters(items, filters)

    source_options = [(s, f"{SOURCE_ICONS.get(s, '')} {s}".strip()) for s in stats.sources]
    cards = "".join(_card(item) for item in visible) or '<div class="loading">No feedback</div>'

    if insights is not None and insights.text:
        sent = '<div class="discord-sent">✅ Sent to Discord</div>' if insights.sent_to_discord else ""
        insights_html = f'<div class="insights-content"><p>{escape(insights.text)}</p>{sent}</div>'
    else:
        insights_html = (
            '<div class="insights-placeholder">Click "Get Insights" to generate an AI summary '
            "and automatically send it to your team's Discord.</div>"
        )

    disabled = " disabled" if stats.analyzed == 0 else ""
    pending = [item.id for item in items if not item.is_analyzed]

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Feedback Analyzer</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 0; padding: 20px; background: #f6f7fb; }}
        .layout {{ display: flex; gap: 20px; }}
        .feedback-panel {{ flex: 2; }}
        .insights-panel {{ flex: 1; }}
        .feedback-card {{ background: white; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); margin-bottom: 12px; padding: 14px; }}
        .feedback-card.analyzing {{ opacity: 0.6; }}
        .tag {{ display: inline-block; margin-right: 6px; padding: 2px 8px; border-radius: 10px; background: #eef; }}
        .stats-grid {{ display: grid; grid-template-columns: 1fr 1fr; gap: 10px; }}
        .stat {{ background: white; border-radius: 8px; padding: 10px; text-align: center; }}
        .stat-value {{ display: block; font-size: 1.5em; font-weight: bold; }}
    </style>
</head>
<body>
    <header>
        <h1>📊 Feedback Analyzer</h1>
        <p>AI-powered feedback aggregation for Product Managers</p>
    </header>
    <div class="layout">
        <div class="feedback-panel">
            <div class="panel-header"><h2>📥 Incoming Feedback</h2><span class="count">{stats.total} items</span></div>
            <form class="filters" method="get" action="/">
                {_select("source", "All Sources", filters.source, source_options)}
                {_select("urgency", "All Urgency", filters.urgency, URGENCY_OPTIONS)}
                {_select("sentiment", "All Sentiment", filters.sentiment, SENTIMENT_OPTIONS)}
            </form>
            <div class="feedback-list">{cards}</div>
        </div>
        <div class="insights-panel">
            <div class="panel-header"><h2>💡 Insights</h2></div>
            <div class="stats-grid">
                <div class="stat"><span class="stat-value">{stats.total}</span><span class="stat-label">Total</span></div>
                <div class="stat negative"><span class="stat-value" id="stat-negative">{stats.negative}</span><span class="stat-label">Negative</span></div>
                <div class="stat positive"><span class="stat-value" id="stat-positive">{stats.positive}</span><span class="stat-label">Positive</span></div>
                <div class="stat urgent"><span class="stat-value" id="stat-high-urgency">{stats.high_urgency}</span><span class="stat-label">High Urgency</span></div>
            </div>
            <form method="post" action="/insights">
                <button class="insights-btn" id="insights-btn" type="submit"{disabled}>✨ Get Insights</button>
            </form>
            {insights_html}
        </div>
    </div>
    {_BACKFILL_SCRIPT.format(pending=json.dumps(pending))}
</body>
</html>"""
