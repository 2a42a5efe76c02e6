"""Object-store client for pre-signed upload and download URLs."""

import asyncio
import logging

import httpx

from sandbox_mcp.exceptions import ProtocolError, TransferIOError
from sandbox_mcp.utils.validation import redact_url

logger = logging.getLogger(__name__)

MAX_ERROR_BODY = 2000


class ObjectStoreClient:
    """Moves archive buffers to and from signed URLs.

    Signed URLs carry their own authorization, so no credentials are
    attached here. Both legs push or pull the whole buffer in one request.
    """

    def __init__(
        self,
        timeout: float = 600.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize object-store client.

        Args:
            timeout: Wall-clock limit for each whole PUT/GET, body included, in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        )

    def _check(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        body = response.text
        if len(body) > MAX_ERROR_BODY:
            body = body[:MAX_ERROR_BODY] + "... [truncated]"
        raise ProtocolError(
            f"{action} failed with status {response.status_code}: {body}",
            status_code=response.status_code,
            body=response.text,
        )

    async def put(self, url: str, data: bytes) -> None:
        """Upload data to a signed write URL.

        Raises:
            ProtocolError: If the store answers with a non-2xx status
            TransferIOError: On network failure or timeout
        """
        safe_url = redact_url(url)
        logger.info("Uploading %d bytes to %s", len(data), safe_url)
        try:
            async with asyncio.timeout(self.timeout), self._client() as client:
                response = await client.put(url, content=data)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise TransferIOError(f"Upload timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise TransferIOError(f"Upload request failed: {e}") from e

        self._check(response, "Upload")

    async def get(self, url: str) -> bytes:
        """Download the full body of a signed read URL.

        Raises:
            ProtocolError: If the store answers with a non-2xx status
            TransferIOError: On network failure or timeout
        """
        safe_url = redact_url(url)
        logger.info("Downloading archive from %s", safe_url)
        try:
            async with asyncio.timeout(self.timeout), self._client() as client:
                response = await client.get(url)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise TransferIOError(f"Download timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise TransferIOError(f"Download request failed: {e}") from e

        self._check(response, "Download")
        logger.info("Downloaded %d bytes", len(response.content))
        return response.content
