"""
Remote job API client implementation.

Infrastructure layer for the upload / job endpoints.
"""

import os
import logging
import threading
from typing import Any, BinaryIO, Optional

import requests
from requests.exceptions import RequestException
from pydantic import ValidationError

from audiobatch.domain.models import RemoteJob, UploadSlot
from audiobatch.domain.exceptions import ApiError, ConfigurationError
from audiobatch.shared.types import JsonDict


DEFAULT_API_BASE = 'https://api.music.ai/api'


class JobApiClient:
    """
    Remote job API client.

    Every call is a single request/response; non-2xx responses raise
    ``ApiError`` without retrying. Calls run on ``asyncio.to_thread`` workers,
    so each worker thread gets its own ``requests.Session`` unless a session
    is injected, in which case the caller owns its thread-safety.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: float = 60.0,
        logger: Optional[logging.Logger] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            api_key: API key (reads from AUDIOBATCH_API_KEY env if None)
            api_base: API base URL (default: https://api.music.ai/api)
            timeout: Per-request timeout in seconds
            logger: Logger instance
            session: Optional pre-configured session shared by every thread
        """
        self.api_key = api_key or os.getenv('AUDIOBATCH_API_KEY')
        if not self.api_key:
            raise ConfigurationError("API key not set (pass api_key or set AUDIOBATCH_API_KEY)")

        self.api_base = api_base or os.getenv('AUDIOBATCH_API_BASE', DEFAULT_API_BASE)
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

        self._shared_session = session
        self._local = threading.local()
        if session is not None:
            session.headers.update({'Accept': 'application/json'})

    @property
    def session(self) -> requests.Session:
        """Session for the calling thread."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, 'session', None)
        if session is None:
            session = requests.Session()
            session.headers.update({'Accept': 'application/json'})
            self._local.session = session
        return session

    def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an authenticated API request.

        Args:
            method: HTTP method
            endpoint: API endpoint
            **kwargs: Additional request arguments

        Returns:
            Response JSON (None for empty bodies)

        Raises:
            ApiError: On transport error or non-2xx response
        """
        url = f"{self.api_base.rstrip('/')}/{endpoint.lstrip('/')}"

        headers = kwargs.pop('headers', {})
        headers['Authorization'] = self.api_key
        kwargs.setdefault('timeout', self.timeout)

        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except RequestException as e:
            status_code = getattr(getattr(e, 'response', None), 'status_code', None)
            error_msg = f"{method} {endpoint} failed: {e}"
            self.logger.debug(error_msg)
            raise ApiError(error_msg, status_code=status_code) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{method} {endpoint} returned invalid JSON", status_code=response.status_code) from e

    def request_upload_slot(self) -> UploadSlot:
        """Ask the API for a pre-signed upload URL."""
        data = self._request('GET', 'upload')
        try:
            return UploadSlot.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Invalid upload slot response: {e}") from e

    def put_file(self, upload_url: str, stream: BinaryIO) -> None:
        """
        Upload file contents to a pre-signed URL.

        The pre-signed URL carries its own credentials, so no API key is sent.
        """
        try:
            response = self.session.put(upload_url, data=stream, timeout=self.timeout)
            response.raise_for_status()
        except RequestException as e:
            status_code = getattr(getattr(e, 'response', None), 'status_code', None)
            raise ApiError(f"File upload failed: {e}", status_code=status_code) from e

    def create_job(self, name: str, workflow_id: str, params: JsonDict) -> str:
        """Create a job against a workflow and return its id."""
        self.logger.debug(f"Creating job '{name}' on workflow {workflow_id}")

        data = self._request(
            'POST',
            'job',
            json={
                'name': name,
                'workflow': workflow_id,
                'params': params,
            }
        )

        job_id = data.get('id') if isinstance(data, dict) else None
        if not job_id:
            raise ApiError("No job id in response")

        return str(job_id)

    def get_job(self, job_id: str) -> RemoteJob:
        """Get job details."""
        data = self._request('GET', f'job/{job_id}')
        try:
            return RemoteJob.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Invalid job response for {job_id}: {e}") from e

    def delete_job(self, job_id: str) -> None:
        """Delete a job."""
        self._request('DELETE', f'job/{job_id}')
        self.logger.debug(f"Deleted job {job_id}")
