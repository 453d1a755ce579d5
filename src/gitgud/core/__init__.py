"""Caching, rate limiting, errors, logging and HTTP middleware."""
