#!/usr/bin/env python3
"""
Basic tool smoke checks
"""

from mcp_harness.scenarios.base import ScenarioSuite, expect, same_url

CORE_TOOLS = ("load_page", "screenshot", "get_current_url", "close_browser")


class SmokeSuite(ScenarioSuite):
    """Quick pass over the core page tools"""

    name = "smoke"
    description = "Core page tools"

    def tests(self):
        return [
            ("Core Tools Listed", self.test_core_tools_listed),
            ("Load Page and Current URL", self.test_load_page),
            ("Page Title", self.test_page_title),
            ("Viewport Info", self.test_viewport_info),
            ("DOM Content", self.test_dom_content),
            ("Screenshot", self.test_screenshot),
        ]

    async def test_core_tools_listed(self):
        names = {tool.get("name") for tool in await self.client.list_tools()}
        missing = [name for name in CORE_TOOLS if name not in names]
        expect(not missing, f"Missing core tools: {', '.join(missing)}")

    async def test_load_page(self):
        page = self.config.first_page_url
        await self.tools.load_page(page, wait_until="domcontentloaded")
        url = (await self.tools.get_current_url()).get("url")
        expect(same_url(url, page), f"Expected current URL {page}, got {url}")

    async def test_page_title(self):
        await self.tools.load_page(self.config.second_page_url, wait_until="domcontentloaded")
        title = (await self.tools.get_page_title()).get("title")
        expect(isinstance(title, str) and title, "Expected a non-empty page title")
        print(f"   Title: {title}")

    async def test_viewport_info(self):
        await self.tools.load_page(self.config.first_page_url, wait_until="domcontentloaded")
        viewport = await self.tools.get_viewport_info()
        width, height = viewport.get("width"), viewport.get("height")
        expect(
            isinstance(width, int) and isinstance(height, int) and width > 0 and height > 0,
            f"Expected positive viewport dimensions, got {width}x{height}"
        )

    async def test_dom_content(self):
        await self.tools.load_page(self.config.second_page_url, wait_until="domcontentloaded")
        dom = (await self.tools.get_dom(selector="title")).get("dom")
        expect(isinstance(dom, str) and "<title" in dom.lower(), "Expected the <title> element markup")

    async def test_screenshot(self):
        await self.tools.load_page(self.config.first_page_url, wait_until="domcontentloaded")
        result = await self.tools.screenshot(full_page=False)
        expect(result.get("filePath"), "Expected the screenshot file path")
        expect(result.get("fullPage") is False, "Expected fullPage to be echoed as false")
        print(f"   Saved {result.get('filePath')}")
