"""Storage package."""

from audiobatch.infrastructure.storage.filesystem import LocalFileSystem

__all__ = ["LocalFileSystem"]
