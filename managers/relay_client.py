"""
Chat relay client over the Discord REST API (aiohttp)

Only the five message primitives the board needs. Ids are always returned
as strings; pages from fetch_messages() come back oldest first.
"""

import random
import asyncio
from typing import Dict, List, Optional

import aiohttp

from config import config
from utils.error_handling import RelayHTTPError, log_error, is_retryable_error


class RelayClient:
    """Minimal REST client for posting and reading channel messages

    Features:
    - One shared aiohttp session (use as an async context manager)
    - 429 handling that honours retry_after
    - 5xx retries with exponential backoff and jitter
    """

    def __init__(self, token: str = None, base_url: str = None, timeout: int = None,
                 max_retries: int = None):
        self.token = token or config.DISCORD_BOT_TOKEN
        self.base_url = (base_url or config.RELAY_BASE_URL).rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout or config.RELAY_TIMEOUT)
        self.max_retries = max_retries or config.MAX_RETRIES
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def open(self):
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={
                    "Authorization": f"Bot {self.token}",
                    "User-Agent": "ScheduleBoardBot (https://discord.com, 1.0)",
                },
                timeout=self.timeout,
            )

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def _request(self, method: str, path: str, json: dict = None, params: dict = None):
        """Send one request, retrying rate limits, server errors and dropped connections

        Returns:
            Decoded JSON body, or None for 204 responses

        Raises:
            RelayHTTPError: Any non-2xx response that was not recovered; status 0
                when the connection failed or timed out on every attempt
        """
        await self.open()
        url = f"{self.base_url}{path}"

        for attempt in range(self.max_retries):
            try:
                async with self.session.request(method, url, json=json, params=params) as response:
                    if response.status == 204:
                        return None
                    if 200 <= response.status < 300:
                        return await response.json()

                    body = await response.text()
                    error = RelayHTTPError(response.status, body, method, path)
                    if not is_retryable_error(error) or attempt + 1 == self.max_retries:
                        raise error

                    if error.is_rate_limited:
                        try:
                            payload = await response.json(content_type=None)
                            wait_time = float(payload.get("retry_after", 1))
                        except (ValueError, aiohttp.ContentTypeError, AttributeError):
                            wait_time = float(response.headers.get("Retry-After", 1))
                    else:
                        # Exponential backoff with jitter
                        wait_time = config.RETRY_DELAY * (2 ** attempt) + random.uniform(0, 0.5)

                    log_error(error, "Relay request", {"attempt": attempt + 1, "wait": f"{wait_time:.1f}s"})
                    print(f"⚠️ Relay {method} {path}: HTTP {response.status}, retrying in {wait_time:.1f}s...")
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt + 1 == self.max_retries:
                    raise RelayHTTPError(0, str(e) or type(e).__name__, method, path) from e
                wait_time = config.RETRY_DELAY * (2 ** attempt) + random.uniform(0, 0.5)
                log_error(e, "Relay request", {"attempt": attempt + 1, "wait": f"{wait_time:.1f}s"})
                print(f"⚠️ Relay {method} {path}: {type(e).__name__}, retrying in {wait_time:.1f}s...")
            await asyncio.sleep(wait_time)
        return None

    # ------------------------------------------------------------------
    # Message primitives
    # ------------------------------------------------------------------

    async def post_message(self, channel_id, content: str, embeds: Optional[list] = None) -> str:
        payload = {"content": content}
        if embeds:
            payload["embeds"] = embeds
        data = await self._request("POST", f"/channels/{channel_id}/messages", json=payload)
        return str(data["id"])

    async def edit_message(self, channel_id, message_id, content: str,
                           embeds: Optional[list] = None) -> str:
        payload = {"content": content}
        if embeds is not None:
            payload["embeds"] = embeds
        data = await self._request("PATCH", f"/channels/{channel_id}/messages/{message_id}", json=payload)
        return str(data["id"])

    async def delete_message(self, channel_id, message_id) -> bool:
        await self._request("DELETE", f"/channels/{channel_id}/messages/{message_id}")
        return True

    async def fetch_messages(self, channel_id, after=None, around=None, limit: int = 50) -> List[Dict]:
        """One page of messages, sorted oldest first"""
        params = {"limit": str(max(1, min(int(limit), 100)))}
        if after is not None:
            params["after"] = str(after)
        elif around is not None:
            params["around"] = str(around)
        data = await self._request("GET", f"/channels/{channel_id}/messages", params=params)
        return sorted(data or [], key=lambda m: int(m["id"]))

    async def fetch_message(self, channel_id, message_id) -> Optional[Dict]:
        try:
            return await self._request("GET", f"/channels/{channel_id}/messages/{message_id}")
        except RelayHTTPError as e:
            if e.is_not_found:
                return None
            raise
