"""HTTP client for talking to the host server over loopback TCP."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from openwork.errors import error_from_kind
from openwork.models import EngineInfo, ErrorResponse, LogEntry, LogsResponse


class HostClient:
    """Client for the host server's engine and log endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        port: int | None = None,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the host client.

        Args:
            base_url: Full base URL (e.g., "http://127.0.0.1:4242"). If provided, port is ignored.
            port: Port number for a loopback connection. Used if base_url is None.
            timeout: Default timeout for requests in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        if base_url:
            self.base_url: str = base_url.rstrip("/")
        elif port:
            self.base_url = f"http://127.0.0.1:{port}"
        else:
            raise ValueError("Either base_url or port must be provided")

        self.timeout: float = timeout
        self._transport: httpx.BaseTransport | None = transport

    def _client(self, timeout: float | None = None) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else self.timeout,
            transport=self._transport,
        )

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        """Turn an error response back into the matching OpenworkError."""
        if response.is_success:
            return
        try:
            body = ErrorResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError):
            response.raise_for_status()
            return
        raise error_from_kind(body.kind, body.message)

    def _request(
        self, method: str, path: str, *, timeout: float | None = None, **kwargs: Any
    ) -> httpx.Response:
        with self._client(timeout) as client:
            response = client.request(method, path, **kwargs)
        self._raise_for_error(response)
        return response

    def is_running(self) -> bool:
        """Check if the host server answers on its root endpoint."""
        try:
            with self._client(timeout=2.0) as client:
                return client.get("/").is_success
        except httpx.HTTPError:
            return False

    def start(self, project_dir: str) -> EngineInfo:
        """Start the engine for a project directory.

        Raises:
            OpenworkError: The server-side error (ValidationError, NotFoundError, ...)
            httpx.HTTPError: If the host server cannot be reached
        """
        # Start may first wait for the previous engine to exit.
        response = self._request(
            "POST",
            "/engine/start",
            json={"projectDir": project_dir},
            timeout=max(self.timeout, 15.0),
        )
        return EngineInfo.model_validate(response.json())

    def stop(self) -> EngineInfo:
        """Stop the engine."""
        response = self._request(
            "POST", "/engine/stop", timeout=max(self.timeout, 15.0)
        )
        return EngineInfo.model_validate(response.json())

    def info(self) -> EngineInfo:
        """Get the current engine snapshot."""
        response = self._request("GET", "/engine/info")
        return EngineInfo.model_validate(response.json())

    def logs(self) -> list[LogEntry]:
        """Fetch the host server's buffered logs."""
        response = self._request("GET", "/logs")
        return LogsResponse.model_validate(response.json()).logs

