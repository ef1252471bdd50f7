"""Memos REST API client.

Thin async client over the Memos v1 API used to create memos, attach files,
list memos page by page and apply partial updates. Every call is a single
request on its own HTTP session; non-2xx responses raise MemosAPIError.
"""

import base64
import logging
from typing import Any

import aiohttp

from ..config import MemosConfig
from ..models import (
    DownloadedFile,
    Memo,
    MemoAttachment,
    MemoPage,
    Visibility,
    memo_id_from_name,
)

logger = logging.getLogger(__name__)

DEFAULT_ORDER_BY = "display_time desc"


class MemosAPIError(Exception):
    """Non-successful response from the Memos API.

    Attributes:
        status: HTTP status code.
        body: Response body text.
    """

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Memos API error ({status}): {body}")


class MemosClient:
    """Async client for the subset of the Memos API the bot needs."""

    def __init__(self, config: MemosConfig, timeout: int = 20):
        """Initialize Memos client with configuration.

        Args:
            config: Memos connection settings.
            timeout: Total request timeout in seconds.
        """
        self.config = config
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one API request and decode its JSON body.

        Raises:
            MemosAPIError: If the response status is not 2xx.
        """
        url = f"{self.config.api_url}{path}"
        headers = {"Authorization": f"Bearer {self.config.token}"}

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.request(
                method, url, params=params, json=payload, headers=headers
            ) as response:
                if response.status < 200 or response.status >= 300:
                    text = await response.text()
                    logger.error(f"Memos API error: {method} {path} -> {response.status} {text}")
                    raise MemosAPIError(response.status, text)
                if response.status == 204:
                    return {}
                return await response.json(content_type=None)

    async def create_memo(self, content: str) -> Memo:
        """Create a memo with the given Markdown content."""
        data = await self._request("POST", "/memos", payload={"content": content})
        memo = Memo.model_validate(data)
        logger.info(f"Created {memo.name}")
        return memo

    async def get_memo(self, name: str) -> Memo:
        """Fetch a memo by resource name or bare id."""
        data = await self._request("GET", f"/memos/{memo_id_from_name(name)}")
        return Memo.model_validate(data)

    async def update_memo(self, name: str, fields: dict[str, Any]) -> Memo:
        """Apply a partial update naming only the given fields.

        Args:
            name: Memo resource name.
            fields: Wire field names mapped to their new values.

        Returns:
            The updated memo as returned by Memos.
        """
        memo_id = memo_id_from_name(name)
        data = await self._request(
            "PATCH",
            f"/memos/{memo_id}",
            params={"updateMask": ",".join(fields)},
            payload={"name": f"memos/{memo_id}", **fields},
        )
        return Memo.model_validate(data) if data else await self.get_memo(name)

    async def set_visibility(self, name: str, visibility: Visibility) -> Memo:
        """Change memo visibility."""
        return await self.update_memo(name, {"visibility": visibility.value})

    async def set_pinned(self, name: str, pinned: bool) -> Memo:
        """Pin or unpin a memo."""
        return await self.update_memo(name, {"pinned": pinned})

    async def create_attachment(self, memo_name: str, file: DownloadedFile) -> MemoAttachment:
        """Upload a file and link it to a memo."""
        payload = {
            "filename": file.filename,
            "type": file.content_type,
            "content": base64.b64encode(file.content).decode("ascii"),
            "memo": memo_name,
        }
        data = await self._request("POST", "/attachments", payload=payload)
        logger.info(f"Attached {file.filename} ({file.content_type}) to {memo_name}")
        return MemoAttachment.model_validate(data)

    async def list_memos(
        self, page_size: int, page_token: str = "", order_by: str = DEFAULT_ORDER_BY
    ) -> MemoPage:
        """Fetch one page of memos.

        Args:
            page_size: Number of memos per page.
            page_token: Continuation token from a previous page, empty for the first.
            order_by: Memos ordering expression.

        Returns:
            Page of memos with an optional continuation token.
        """
        params = {"pageSize": str(page_size), "orderBy": order_by}
        if page_token:
            params["pageToken"] = page_token
        data = await self._request("GET", "/memos", params=params)
        return MemoPage.model_validate(data)

    def memo_link(self, name: str) -> str:
        """Public web link for a memo."""
        memo_id = memo_id_from_name(name)
        return f"{self.config.base_url}/memos/{memo_id}" if memo_id else self.config.base_url
