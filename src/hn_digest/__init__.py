"""Personalized Hacker News digest with feedback-conditioned filtering."""

__version__ = "0.1.0"
