"""Revalidate functions that refetch stale items from an origin."""

import logging
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class HttpRevalidator:
    """Refetch an item by GETting ``{base_url}/{key}``.

    The key is percent-encoded as a single path segment, so ``/``, ``?`` and
    ``#`` inside a key never change which resource is requested.

    Pass an instance as ``revalidate_fn``. A non-2xx response raises
    httpx.HTTPStatusError, which the engine counts as a revalidation failure.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        """Initialize HttpRevalidator.

        Args:
            base_url: Origin URL the cache keys are relative to.
            client: Shared client. One is created lazily when omitted.
            timeout: Request timeout in seconds for a lazily created client.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def __call__(self, key: str) -> str:
        client = await self._get_client()
        url = f"{self.base_url}/{quote(key, safe='')}"
        logger.debug(f"Revalidating {key} from {url}")
        response = await client.get(url)
        response.raise_for_status()
        return response.text

    async def aclose(self) -> None:
        """Close the client if this revalidator created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
