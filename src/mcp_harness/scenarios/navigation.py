#!/usr/bin/env python3
"""
History navigation scenarios
"""

from mcp_harness.scenarios.base import ScenarioSuite, expect, same_url

NAVIGATION_TOOLS = ("go_back", "go_forward", "reload_page")


class NavigationSuite(ScenarioSuite):
    """go_back, go_forward and reload_page against a two-page history"""

    name = "navigation"
    description = "Browser history navigation"

    def tests(self):
        return [
            ("Navigation Tools Listed", self.test_navigation_tools_listed),
            ("Back and Forward Navigation", self.test_back_and_forward),
            ("Reload Page", self.test_reload_page),
        ]

    async def current_url(self) -> str:
        result = await self.tools.get_current_url()
        return result.get("url") or ""

    async def test_navigation_tools_listed(self):
        tools = await self.client.list_tools()
        names = {tool.get("name") for tool in tools}
        missing = [name for name in NAVIGATION_TOOLS if name not in names]
        expect(not missing, f"Missing navigation tools: {', '.join(missing)}")
        print(f"   {len(tools)} tools available")

    async def test_back_and_forward(self):
        first = self.config.first_page_url
        second = self.config.second_page_url
        timeout = self.config.navigation_timeout

        await self.tools.load_page(first, wait_until="domcontentloaded")
        await self.tools.load_page(second, wait_until="domcontentloaded")
        url = await self.current_url()
        expect(same_url(url, second), f"Expected to be on {second}, got {url}")

        await self.tools.go_back(timeout=timeout, wait_until="domcontentloaded")
        url = await self.current_url()
        expect(same_url(url, first), f"go_back should return to {first}, got {url}")

        await self.tools.go_forward(timeout=timeout, wait_until="domcontentloaded")
        url = await self.current_url()
        expect(same_url(url, second), f"go_forward should return to {second}, got {url}")
        print(f"   {first} <-> {second}")

    async def test_reload_page(self):
        page = self.config.second_page_url
        timeout = self.config.navigation_timeout

        await self.tools.load_page(page, wait_until="domcontentloaded")

        for ignore_cache in (False, True):
            result = await self.tools.reload_page(
                ignore_cache=ignore_cache,
                timeout=timeout,
                wait_until="domcontentloaded"
            )
            expect(
                result.get("ignoreCache", ignore_cache) == ignore_cache,
                f"reload_page should echo ignoreCache={ignore_cache}"
            )
            url = await self.current_url()
            expect(same_url(url, page), f"Reload should stay on {page}, got {url}")
        print("   Soft and hard reload kept the current page")
