"""Slack Web API client and rich-text rendering for imported messages."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from squeak.core.config import settings
from squeak.services.http_service import request_with_retries

logger = logging.getLogger(__name__)


class SlackApiError(Exception):
    """Slack answered with ``ok: false`` or an unusable HTTP response."""

    def __init__(self, method: str, error: str):
        self.method = method
        self.error = error
        super().__init__(f"Slack {method} failed: {error}")


class SlackClient:
    """Minimal Slack Web API client bound to one bot token."""

    def __init__(
        self,
        token: str,
        http_client: httpx.AsyncClient,
        base_url: str | None = None,
    ):
        self.token = token
        self.http_client = http_client
        self.base_url = (base_url or settings.SLACK_API_BASE_URL).rstrip("/")

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def _read(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{method}"
        response = await request_with_retries(
            lambda: self.http_client.get(url, params=params, headers=self._headers)
        )
        return self._parse(method, response)

    def _parse(self, method: str, response: httpx.Response) -> dict[str, Any]:
        if response.status_code >= 400:
            raise SlackApiError(method, f"http_{response.status_code}")
        try:
            data = response.json()
        except ValueError:
            raise SlackApiError(method, "invalid_json")
        if not data.get("ok"):
            raise SlackApiError(method, str(data.get("error") or "unknown_error"))
        return data

    async def _paginate(self, method: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Collect ``messages`` across every page of a cursor-paginated method."""
        messages: list[dict[str, Any]] = []
        cursor: str | None = None
        while True:
            page_params = {**params, "limit": 200}
            if cursor:
                page_params["cursor"] = cursor
            data = await self._read(method, page_params)
            messages.extend(data.get("messages") or [])
            cursor = (data.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return messages

    async def conversations_history(self, channel: str) -> list[dict[str, Any]]:
        """Top-level messages of a channel."""
        return await self._paginate("conversations.history", {"channel": channel})

    async def conversations_replies(self, channel: str, ts: str) -> list[dict[str, Any]]:
        """All messages of a thread, parent first."""
        return await self._paginate("conversations.replies", {"channel": channel, "ts": ts})

    async def post_message(
        self,
        channel: str,
        text: str,
        blocks: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Post a message. Not retried, a retry could post twice."""
        payload: dict[str, Any] = {"channel": channel, "text": text}
        if blocks:
            payload["blocks"] = blocks
        response = await self.http_client.post(
            f"{self.base_url}/chat.postMessage", json=payload, headers=self._headers
        )
        return self._parse("chat.postMessage", response)


# =============================================================================
# Rich text -> markdown
# =============================================================================

def _render_text(element: dict[str, Any]) -> str:
    text = element.get("text", "")
    style = element.get("style") or {}
    if not text.strip():
        return text
    if style.get("code"):
        text = f"`{text}`"
    if style.get("bold"):
        text = f"**{text}**"
    if style.get("italic"):
        text = f"_{text}_"
    if style.get("strike"):
        text = f"~~{text}~~"
    return text


def _render_inline(element: dict[str, Any]) -> str:
    kind = element.get("type")
    if kind == "text":
        return _render_text(element)
    if kind == "link":
        url = element.get("url", "")
        label = element.get("text") or url
        return f"[{label}]({url})"
    if kind == "user":
        return f"@{element.get('user_id', '')}"
    if kind == "channel":
        return f"#{element.get('channel_id', '')}"
    if kind == "emoji":
        if element.get("unicode"):
            return "".join(chr(int(code, 16)) for code in element["unicode"].split("-"))
        return f":{element.get('name', '')}:"
    if kind == "broadcast":
        return f"@{element.get('range', 'here')}"
    return element.get("text", "")


def _render_section(elements: list[dict[str, Any]]) -> str:
    return "".join(_render_inline(el) for el in elements)


def format_slack_message(elements: list[dict[str, Any]]) -> str:
    """Render the elements of a Slack ``rich_text`` block as markdown."""
    parts: list[str] = []
    for element in elements:
        kind = element.get("type")
        children = element.get("elements") or []
        if kind == "rich_text_section":
            parts.append(_render_section(children))
        elif kind == "rich_text_preformatted":
            parts.append(f"```\n{_render_section(children)}\n```")
        elif kind == "rich_text_quote":
            quoted = _render_section(children).splitlines() or [""]
            parts.append("\n".join(f"> {line}" for line in quoted))
        elif kind == "rich_text_list":
            ordered = element.get("style") == "ordered"
            items = []
            for index, item in enumerate(children, start=1):
                marker = f"{index}." if ordered else "-"
                items.append(f"{marker} {_render_section(item.get('elements') or [])}")
            parts.append("\n".join(items))
        else:
            parts.append(_render_inline(element))
    return "\n".join(part for part in parts if part)


def message_body(message: dict[str, Any]) -> str:
    """Markdown body of a Slack message, falling back to its plain text."""
    blocks = message.get("blocks") or []
    if blocks:
        return format_slack_message(blocks[0].get("elements") or [])
    return message.get("text") or ""
