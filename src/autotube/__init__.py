"""Autotube: script-to-video production pipeline."""

__version__ = "0.1.0"
