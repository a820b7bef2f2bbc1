"""Topical quiz catalog and quiz-taking session engine."""

__version__ = "0.1.0"
