"""Upstream profile-signal sources."""

from .github import GitHubClient

__all__ = ["GitHubClient"]
