"""Cloudinary API client for product photos."""

import base64
import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from catalog.config import settings
from catalog.errors import UpstreamError
from catalog.models import Photo

logger = logging.getLogger(__name__)

# Parameters Cloudinary leaves out of the request signature
_UNSIGNED_PARAMS = frozenset({"file", "api_key", "resource_type", "cloud_name"})


class MediaStoreError(UpstreamError):
    """Raised when an image upload or removal fails."""


@dataclass(frozen=True)
class UploadedImage:
    """An image received from a client, ready to be sent to the media store."""

    content: bytes
    content_type: str = "application/octet-stream"
    filename: str = ""


def to_data_uri(content: bytes, content_type: str) -> str:
    """Encode file content as a base64 data URI."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class MediaStoreClient:
    """Async client for the Cloudinary image upload API.

    Requests are signed with the API secret. Failures are logged and raised as
    MediaStoreError; nothing is retried.
    """

    def __init__(
        self,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        base_url: str | None = None,
    ) -> None:
        """Initialize the media store client.

        Args:
            cloud_name: Cloudinary cloud name. Defaults to settings.
            api_key: Cloudinary API key. Defaults to settings.
            api_secret: Cloudinary API secret. Defaults to settings.
            base_url: API base URL. Defaults to settings.
        """
        self.cloud_name = cloud_name or settings.cloudinary_cloud_name
        self.api_key = api_key or settings.cloudinary_api_key
        self.api_secret = api_secret or settings.cloudinary_api_secret
        self.base_url = (base_url or settings.cloudinary_base_url).rstrip("/")
        self._http_client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "MediaStoreClient":
        """Enter async context manager."""
        self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit async context manager."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def _client(self) -> httpx.AsyncClient:
        """Get the HTTP client, raising if not in context manager."""
        if self._http_client is None:
            raise RuntimeError(
                "MediaStoreClient must be used as an async context manager"
            )
        return self._http_client

    def sign(self, params: dict[str, Any]) -> str:
        """Compute the SHA-1 request signature for ``params``.

        Signed parameters are sorted by name, joined as ``key=value`` pairs
        with ``&`` and suffixed with the API secret.
        """
        to_sign = "&".join(
            f"{key}={value}"
            for key, value in sorted(params.items())
            if key not in _UNSIGNED_PARAMS and value not in (None, "")
        )
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    def _signed_payload(self, params: dict[str, Any]) -> dict[str, Any]:
        if not self.cloud_name or not self.api_key or not self.api_secret:
            raise MediaStoreError(
                "Cloudinary cloud_name, api_key and api_secret must be configured"
            )
        payload = {**params, "timestamp": str(int(time.time()))}
        payload["signature"] = self.sign(payload)
        payload["api_key"] = self.api_key
        return payload

    async def _post(self, action: str, params: dict[str, Any]) -> dict[str, Any]:
        """Send a signed image API request.

        Args:
            action: Image API action ("upload" or "destroy").
            params: Request parameters to sign and send.

        Returns:
            Parsed JSON response.

        Raises:
            MediaStoreError: If the request fails.
        """
        url = f"{self.base_url}/v1_1/{self.cloud_name}/image/{action}"
        payload = self._signed_payload(params)

        try:
            response = await self._client.post(url, data=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Cloudinary %s failed: %s %s",
                action,
                e.response.status_code,
                e.response.text,
            )
            raise MediaStoreError(
                f"Image {action} failed: {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error("Cloudinary %s request error: %s", action, e)
            raise MediaStoreError(f"Image {action} request failed: {e}") from e

        return response.json()  # type: ignore[no-any-return]

    async def upload(
        self,
        content: bytes,
        folder: str,
        content_type: str = "application/octet-stream",
    ) -> Photo:
        """Upload an image and return its hosted reference.

        Raises:
            MediaStoreError: If the upload fails or the response lacks an id or URL.
        """
        data = await self._post(
            "upload",
            {"file": to_data_uri(content, content_type), "folder": folder},
        )
        public_id = data.get("public_id")
        url = data.get("secure_url")
        if not public_id or not url:
            logger.error("Cloudinary upload response missing public_id or secure_url")
            raise MediaStoreError("Error while uploading file")

        logger.info("Uploaded image %s to folder %s", public_id, folder)
        return Photo(public_id=public_id, url=url)

    async def remove(self, public_id: str) -> None:
        """Delete a hosted image.

        An already-missing image is logged and otherwise ignored.
        """
        data = await self._post("destroy", {"public_id": public_id})
        result = data.get("result")
        if result == "not found":
            logger.warning("Image %s was already missing from the media store", public_id)
        elif result != "ok":
            raise MediaStoreError(f"Image removal failed: {result}")
        else:
            logger.info("Removed image %s", public_id)
