"""
Feedlens: feedback triage and digests.

Classifies incoming user feedback with a language model and posts
aggregate digests to a team chat webhook.
"""

__version__ = "1.0.0"
