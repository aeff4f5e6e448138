"""Bounded HTTP body reading.

Both the JSON API client and the ledger RPC gateway read response bodies
through [read_bounded_json()][ninasdk.utils.http.read_bounded_json] so an
oversized payload (for example a ``getMultipleAccounts`` reply for a full
batch of large accounts behind a misbehaving proxy) fails fast instead of
exhausting memory.

Note:
    This module depends only on stdlib and ``aiohttp``. It is importable
    from both ``ledger`` and ``api`` without creating a cycle.
"""

from __future__ import annotations

import json
from typing import Any

import aiohttp


async def read_bounded(response: aiohttp.ClientResponse, max_size: int) -> bytes:
    """Read an entire response body with size enforcement.

    Accumulates chunks until EOF or until the size limit is exceeded. A
    single ``response.content.read(n)`` is not enough: with chunked
    transfer-encoding a read may return fewer bytes than requested while
    more data is still pending.

    Args:
        response: An aiohttp response whose body has not yet been consumed.
        max_size: Maximum allowed body size in bytes.

    Returns:
        The complete response body.

    Raises:
        ValueError: If the body exceeds *max_size*.
    """
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await response.content.read(max_size + 1 - total)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            raise ValueError(f"Response body too large: >{max_size} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


async def read_bounded_json(response: aiohttp.ClientResponse, max_size: int) -> Any:
    """Read and parse a JSON body with size enforcement.

    The size check happens *before* parsing.

    Raises:
        ValueError: If the body exceeds *max_size*.
        json.JSONDecodeError: If the body is not valid JSON.
    """
    body = await read_bounded(response, max_size)
    return json.loads(body)
