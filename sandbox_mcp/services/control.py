"""Control API client for remote machine transfers.

Issues authenticated JSON requests to the control API. Every request
creates its own HTTP client, so concurrent transfers share no state.
"""

import asyncio
import json
import logging
from typing import Any

import httpx

from sandbox_mcp import __version__
from sandbox_mcp.exceptions import ProtocolError, TransferIOError
from sandbox_mcp.models import UploadTicket

logger = logging.getLogger(__name__)

USER_AGENT = f"sandbox-mcp/{__version__}"

# Error bodies are echoed back to the caller; keep them short
MAX_ERROR_BODY = 2000


def _truncate_body(text: str) -> str:
    if len(text) > MAX_ERROR_BODY:
        return text[:MAX_ERROR_BODY] + "... [truncated]"
    return text


class ControlClient:
    """Client for the machine control API.

    Example:
        client = ControlClient(base_url="https://api.example.com/v0.1", token="pat")
        ticket = await client.begin_upload("machine-1")
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize control client.

        Args:
            base_url: API base URL (e.g. https://api.bitrise.io/v0.1)
            token: Personal access token sent as the Authorization header
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._token = token
        self.timeout = timeout
        self._transport = transport

    def _machine_path(self, machine_id: str, action: str) -> str:
        return f"/platform/me/machines/{machine_id}/{action}"

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": self._token,
        }

    async def call_api(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send an authenticated JSON request and parse the JSON response.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            body: Optional JSON body
            params: Optional query parameters

        Returns:
            Parsed JSON object (empty dict for an empty body)

        Raises:
            ProtocolError: If no token is set, the status is not 2xx, or the
                response is not a JSON object
            TransferIOError: If the request fails at the network level
        """
        if not self._token:
            raise ProtocolError(
                "No API token configured; set SANDBOX_API_TOKEN to your personal access token"
            )

        if not path.startswith("/"):
            path = "/" + path
        url = self.base_url + path

        logger.debug("%s %s", method, url)
        try:
            async with asyncio.timeout(self.timeout), httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._headers(),
                    json=body,
                    params=params,
                )
        except (TimeoutError, httpx.TimeoutException) as e:
            raise TransferIOError(f"{method} {path} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise TransferIOError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            raise ProtocolError(
                f"Unexpected status code {response.status_code}; "
                f"response body: {_truncate_body(response.text)}",
                status_code=response.status_code,
                body=response.text,
            )

        if not response.content.strip():
            return {}

        try:
            payload = response.json()
        except ValueError as e:
            raise ProtocolError(
                f"Unparsable response from {path}: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(payload, dict):
            raise ProtocolError(
                f"Expected a JSON object from {path}, got {type(payload).__name__}",
                status_code=response.status_code,
                body=response.text,
            )
        return payload

    async def begin_upload(self, machine_id: str) -> UploadTicket:
        """Start an upload session for a machine.

        Returns:
            UploadTicket with the upload id and signed write URL
        """
        payload = await self.call_api("POST", self._machine_path(machine_id, "start_upload"))

        upload_id = payload.get("uploadId")
        signed_url = payload.get("signedUrl")
        if not upload_id or not signed_url:
            raise ProtocolError(
                "start_upload response is missing uploadId or signedUrl",
                body=json.dumps(payload),
            )
        return UploadTicket(upload_id=str(upload_id), signed_url=str(signed_url))

    async def complete_upload(
        self,
        machine_id: str,
        upload_id: str,
        destination_parent: str,
    ) -> dict[str, Any]:
        """Finalize an upload; the machine then extracts the archive."""
        return await self.call_api(
            "POST",
            self._machine_path(machine_id, "complete_upload"),
            body={
                "uploadId": upload_id,
                "destinationParentFolder": destination_parent,
            },
        )

    async def request_download(
        self,
        machine_id: str,
        source_path: str,
        contents_only: bool = False,
    ) -> str:
        """Ask the machine to archive source_path and return a signed read URL."""
        payload = await self.call_api(
            "POST",
            self._machine_path(machine_id, "download"),
            body={
                "sourcePath": source_path,
                "onlyContentsOfFolder": contents_only,
            },
        )

        signed_url = payload.get("signedUrl")
        if not signed_url:
            raise ProtocolError(
                "download response is missing signedUrl",
                body=json.dumps(payload),
            )
        return str(signed_url)
