"""Roast generation."""

from .generate import RoastGenerator

__all__ = ["RoastGenerator"]
