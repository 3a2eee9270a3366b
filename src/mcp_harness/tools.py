#!/usr/bin/env python3
"""
Typed wrappers for the Browser MCP server's tools
"""

from typing import Dict, Any, Optional

from mcp_harness.models import ToolResult


def _args(**kwargs: Any) -> Dict[str, Any]:
    """Drop unset arguments so the server applies its own defaults"""
    return {key: value for key, value in kwargs.items() if value is not None}


class BrowserTools:
    """One coroutine per server tool, each returning the tool's result envelope"""

    def __init__(self, client):
        self.client = client

    # Navigation

    async def load_page(self, url: str, wait_until: Optional[str] = None) -> ToolResult:
        return await self.client.call_tool("load_page", _args(url=url, waitUntil=wait_until))

    async def go_back(self, timeout: Optional[int] = None, wait_until: Optional[str] = None) -> ToolResult:
        return await self.client.call_tool("go_back", _args(timeout=timeout, waitUntil=wait_until))

    async def go_forward(self, timeout: Optional[int] = None, wait_until: Optional[str] = None) -> ToolResult:
        return await self.client.call_tool("go_forward", _args(timeout=timeout, waitUntil=wait_until))

    async def reload_page(
        self,
        ignore_cache: Optional[bool] = None,
        timeout: Optional[int] = None,
        wait_until: Optional[str] = None
    ) -> ToolResult:
        return await self.client.call_tool(
            "reload_page",
            _args(ignoreCache=ignore_cache, timeout=timeout, waitUntil=wait_until)
        )

    async def get_current_url(self) -> ToolResult:
        return await self.client.call_tool("get_current_url")

    async def close_browser(self) -> ToolResult:
        return await self.client.call_tool("close_browser")

    # Page inspection

    async def get_page_title(self) -> ToolResult:
        return await self.client.call_tool("get_page_title")

    async def get_viewport_info(self) -> ToolResult:
        return await self.client.call_tool("get_viewport_info")

    async def get_dom(self, selector: Optional[str] = None) -> ToolResult:
        return await self.client.call_tool("get_dom", _args(selector=selector))

    async def screenshot(self, full_page: Optional[bool] = None) -> ToolResult:
        return await self.client.call_tool("screenshot", _args(fullPage=full_page))

    async def evaluate_js(self, code: str, timeout: Optional[int] = None) -> ToolResult:
        return await self.client.call_tool("evaluate_js", _args(code=code, timeout=timeout))

    # Console and network monitoring

    async def get_console_logs(self, level: Optional[str] = None, limit: Optional[int] = None) -> ToolResult:
        return await self.client.call_tool("get_console_logs", _args(level=level, limit=limit))

    async def clear_console_logs(self) -> ToolResult:
        return await self.client.call_tool("clear_console_logs")

    async def get_network_logs(
        self,
        method: Optional[str] = None,
        status: Optional[int] = None,
        url_pattern: Optional[str] = None,
        limit: Optional[int] = None
    ) -> ToolResult:
        return await self.client.call_tool(
            "get_network_logs",
            _args(method=method, status=status, url_pattern=url_pattern, limit=limit)
        )

    async def clear_network_logs(self) -> ToolResult:
        return await self.client.call_tool("clear_network_logs")
