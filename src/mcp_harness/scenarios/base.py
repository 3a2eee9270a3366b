#!/usr/bin/env python3
"""
Shared plumbing for scenario suites
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, List, Tuple
from urllib.parse import urlsplit

from mcp_harness.config import HarnessConfig
from mcp_harness.models import ToolResult
from mcp_harness.tools import BrowserTools

ScenarioTest = Callable[[], Awaitable[None]]


def expect(condition: Any, message: str):
    """Fail the current scenario with message unless condition holds"""
    if not condition:
        raise AssertionError(message)


def same_url(left: str, right: str) -> bool:
    """Compare URLs ignoring a missing root path and a trailing slash"""
    a, b = urlsplit(left or ""), urlsplit(right or "")
    return (
        a.scheme == b.scheme
        and a.netloc == b.netloc
        and (a.path.rstrip("/") or "/") == (b.path.rstrip("/") or "/")
        and a.query == b.query
    )


def logs_of(result: ToolResult) -> List[dict]:
    """Extract data.logs from a console or network log result"""
    logs = result.get("logs")
    expect(isinstance(logs, list), f"Expected data.logs to be a list, got {type(logs).__name__}")
    return logs


class ScenarioSuite:
    """A named, ordered group of self-contained scenario tests"""

    name = "suite"
    description = ""

    def __init__(self, client, config: HarnessConfig):
        self.client = client
        self.config = config
        self.tools = BrowserTools(client)

    def tests(self) -> List[Tuple[str, ScenarioTest]]:
        """Return (title, coroutine function) pairs in run order"""
        raise NotImplementedError

    async def settle(self):
        """Give the server a moment to finish asynchronous work"""
        if self.config.operation_delay > 0:
            await asyncio.sleep(self.config.operation_delay)

    async def poll_until(
        self,
        query: Callable[[], Awaitable[ToolResult]],
        predicate: Callable[[ToolResult], bool]
    ) -> ToolResult:
        """Repeat query until predicate accepts its result or poll_timeout passes

        Returns:
            The first accepted result, or the last one seen on timeout
        """
        deadline = time.monotonic() + self.config.poll_timeout
        result = await query()
        while not predicate(result) and time.monotonic() < deadline:
            await asyncio.sleep(self.config.poll_interval)
            result = await query()
        return result
