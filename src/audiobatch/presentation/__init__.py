"""Presentation layer package."""

from audiobatch.presentation.cli import main, build_parser

__all__ = ["main", "build_parser"]
