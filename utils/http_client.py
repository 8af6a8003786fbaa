"""
Async HTTP client with retries and timeout handling.
"""
import asyncio
import logging
import socket
from dataclasses import dataclass
from typing import Optional, Dict, Any
from urllib.parse import urlparse

import aiohttp
from aiohttp import ClientTimeout, ClientError

from config import settings

logger = logging.getLogger(__name__)


@dataclass
class JsonResponse:
    """Outcome of a JSON request."""
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None


class HttpClient:
    """Async JSON client with retry on rate limiting and server errors."""

    def __init__(self, timeout_seconds: Optional[float] = None):
        self._session: Optional[aiohttp.ClientSession] = None
        self._timeout_seconds = timeout_seconds or settings.inference_timeout_seconds

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = ClientTimeout(total=self._timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    def _get_domain(self, url: str) -> str:
        """Extract domain from URL."""
        return urlparse(url).netloc or "unknown"

    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        max_retries: int = 3,
    ) -> JsonResponse:
        """
        Perform POST request with a JSON body and parse the JSON response.

        Args:
            url: Target URL
            payload: JSON-serializable request body
            headers: Additional headers (e.g. Authorization)
            max_retries: Maximum retry attempts

        Returns:
            JsonResponse with parsed data, or with ``error`` describing
            why no usable response was received
        """
        domain = self._get_domain(url)
        session = await self._get_session()
        error = f"No response from {domain}"

        for attempt in range(max(1, max_retries)):
            try:
                logger.debug(f"[HTTP] POST {url} (attempt {attempt + 1}/{max_retries})")

                async with session.post(url, json=payload, headers=headers) as response:
                    if response.status == 200:
                        data = await response.json(content_type=None)
                        if not isinstance(data, dict):
                            return JsonResponse(error=f"Unexpected JSON body from {domain}")
                        return JsonResponse(data=data)

                    body = (await response.text())[:300]

                    if response.status == 429:
                        # Rate limited - exponential backoff
                        wait_time = 2 ** attempt
                        logger.warning(f"[HTTP] Rate limited by {domain}, waiting {wait_time}s")
                        error = f"HTTP 429 from {domain}: {body}"
                        await asyncio.sleep(wait_time)
                        continue

                    elif response.status >= 500:
                        # Server error - retry once
                        logger.warning(f"[HTTP] Server error {response.status} from {domain}")
                        error = f"HTTP {response.status} from {domain}: {body}"
                        if attempt == 0:
                            await asyncio.sleep(1)
                            continue
                        return JsonResponse(error=error)

                    else:
                        logger.warning(f"[HTTP] Request failed with status {response.status} from {url}")
                        return JsonResponse(error=f"HTTP {response.status} from {domain}: {body}")

            except asyncio.TimeoutError:
                # Timeout - do NOT retry, the call already used its budget
                logger.warning(f"[HTTP] Timeout for {url}")
                return JsonResponse(error=f"Timeout after {self._timeout_seconds}s calling {domain}")

            except (socket.gaierror, OSError) as e:
                logger.warning(f"[HTTP] DNS/Network error for {url}: {e}")
                return JsonResponse(error=f"Network error calling {domain}: {e}")

            except (ClientError, ValueError) as e:
                logger.error(f"[HTTP] Client error for {url}: {e}")
                return JsonResponse(error=f"Client error calling {domain}: {e}")

        return JsonResponse(error=error)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()


# Global client instance
http_client = HttpClient()
