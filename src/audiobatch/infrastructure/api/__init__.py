"""Remote job API package."""

from audiobatch.infrastructure.api.client import JobApiClient, DEFAULT_API_BASE

__all__ = ["JobApiClient", "DEFAULT_API_BASE"]
