# uigen/llm/http.py
"""
Vendor HTTP helpers.

One aiohttp session per call. Non-2xx replies raise VendorResponseError
carrying the status and the decoded body so each adapter can map it to
its own error message.
"""
import json
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import aiohttp


class VendorResponseError(Exception):
    """Non-2xx reply from a vendor API."""

    def __init__(self, status: int, body: Any):
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {self.vendor_message or str(body)[:200]}")

    @property
    def vendor_message(self) -> Optional[str]:
        if isinstance(self.body, dict):
            error = self.body.get("error")
            if isinstance(error, dict):
                return error.get("message")
            if isinstance(error, str):
                return error
            return self.body.get("message")
        return None

    @property
    def vendor_code(self) -> Optional[str]:
        if isinstance(self.body, dict) and isinstance(self.body.get("error"), dict):
            error = self.body["error"]
            return error.get("code") or error.get("type") or error.get("status")
        return None


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return text


async def post_json(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float) -> Dict[str, Any]:
    async with aiohttp.ClientSession() as session:
        async with session.post(
            url,
            json=payload,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout)
        ) as response:
            text = await response.text()
            if response.status >= 300:
                raise VendorResponseError(response.status, _decode(text))
            return json.loads(text)


class SSEParser:
    """
    Incremental server-sent events parser.

    Feed it one line at a time; it returns (event, data) when a blank line
    completes an event.
    """

    def __init__(self) -> None:
        self.event: Optional[str] = None
        self.data: List[str] = []

    def feed(self, line: str) -> Optional[Tuple[Optional[str], str]]:
        line = line.rstrip("\r\n")
        if not line:
            return self.flush()
        if line.startswith(":"):
            return None

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            self.event = value
        elif name == "data":
            self.data.append(value)
        return None

    def flush(self) -> Optional[Tuple[Optional[str], str]]:
        if not self.data:
            self.event = None
            return None
        message = (self.event, "\n".join(self.data))
        self.event, self.data = None, []
        return message


async def stream_sse(
    url: str,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
) -> AsyncIterator[Tuple[Optional[str], str]]:
    """POST and yield (event, data) pairs from a text/event-stream reply."""
    parser = SSEParser()
    async with aiohttp.ClientSession() as session:
        async with session.post(
            url,
            json=payload,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout)
        ) as response:
            if response.status >= 300:
                raise VendorResponseError(response.status, _decode(await response.text()))

            async for raw in response.content:
                message = parser.feed(raw.decode("utf-8"))
                if message is not None:
                    yield message

            message = parser.flush()
            if message is not None:
                yield message
