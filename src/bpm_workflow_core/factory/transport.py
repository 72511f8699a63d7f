"""Fetch JSON documents over HTTP with aiohttp."""
from __future__ import annotations

import asyncio
import logging

import aiohttp

from bpm_workflow_core.errors import TransportError

logger = logging.getLogger(__name__)


async def fetch_json(url: str, timeout_seconds: float = 30.0) -> object:
    """GET *url* and decode the body as JSON.

    Raises
    ------
    TransportError:
        On connection errors, timeouts, non-2xx responses and bodies that
        are not valid JSON.
    """
    logger.info("Fetching %s", url)
    try:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout_seconds)
        ) as session:
            async with session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(url, f"Failed to fetch: {response.status} {response.reason}")
                return await response.json(content_type=None)
    except aiohttp.ClientError as exc:
        raise TransportError(url, f"Failed to fetch: {exc}") from exc
    except asyncio.TimeoutError as exc:
        raise TransportError(url, f"Timed out after {timeout_seconds} seconds") from exc
    except ValueError as exc:
        raise TransportError(url, f"Invalid JSON in response: {exc}") from exc
