#!/usr/bin/env python3
"""
Network request capture scenarios
"""

import re

from mcp_harness.scenarios.base import ScenarioSuite, expect, logs_of


class NetworkSuite(ScenarioSuite):
    """get_network_logs capture, filters and clearing, plus combined monitoring"""

    name = "network"
    description = "Network request capture and filtering"

    def tests(self):
        return [
            ("Network Request Logging", self.test_network_logging),
            ("Network Log Method Filtering", self.test_method_filter),
            ("Network Log Status Filtering", self.test_status_filter),
            ("Network Log URL Pattern Filtering", self.test_url_pattern_filter),
            ("Clear Network Logs", self.test_clear_network_logs),
            ("Combined Console and Network Monitoring", self.test_combined_monitoring),
        ]

    async def seed_network_logs(self):
        """Start from an empty buffer holding the requests of one page load"""
        await self.tools.clear_network_logs()
        await self.tools.load_page(self.config.network_test_url, wait_until="networkidle")
        await self.poll_until(
            self.tools.get_network_logs,
            lambda result: len(result.get("logs") or []) > 0
        )

    async def test_network_logging(self):
        await self.seed_network_logs()

        logs = logs_of(await self.tools.get_network_logs())
        expect(logs, "Expected network requests to be captured")

        first = logs[0]
        expect(
            first.get("timestamp") and first.get("method") and first.get("url"),
            "Network log entries should have timestamp, method, and url"
        )
        print(f"   Captured {len(logs)} network requests")

    async def test_method_filter(self):
        await self.seed_network_logs()

        logs = logs_of(await self.tools.get_network_logs(method="GET"))
        others = [log for log in logs if log.get("method") != "GET"]
        expect(not others, "Method filtering should only return GET requests")
        print(f"   Filtered to {len(logs)} GET requests")

    async def test_status_filter(self):
        await self.seed_network_logs()

        logs = logs_of(await self.tools.get_network_logs(status=200))
        others = [log for log in logs if log.get("status") != 200]
        expect(not others, "Status filtering should only return requests with status 200")
        print(f"   Filtered to {len(logs)} requests with status 200")

    async def test_url_pattern_filter(self):
        await self.seed_network_logs()

        pattern = self.config.url_pattern
        logs = logs_of(await self.tools.get_network_logs(url_pattern=pattern))
        regex = re.compile(pattern)
        others = [log for log in logs if not regex.search(log.get("url") or "")]
        expect(not others, "URL pattern filtering should only return matching requests")
        print(f"   Filtered to {len(logs)} requests matching {pattern}")

    async def test_clear_network_logs(self):
        await self.seed_network_logs()

        for attempt in range(2):
            await self.tools.clear_network_logs()
            logs = logs_of(await self.tools.get_network_logs())
            expect(
                len(logs) == 0,
                f"Network logs should be empty after clearing (clear #{attempt + 1}, got {len(logs)})"
            )
        print("   Network logs cleared successfully")

    async def test_combined_monitoring(self):
        await self.tools.clear_console_logs()
        await self.tools.clear_network_logs()

        await self.tools.load_page(self.config.network_test_url, wait_until="domcontentloaded")
        await self.tools.evaluate_js(f"""
            console.log('Starting combined test');
            console.warn('Test warning message');
            fetch('{self.config.fetch_test_url}')
                .then(() => console.log('Network request completed'))
                .catch(e => console.error('Network request failed:', e));
        """)

        console_logs = logs_of(await self.poll_until(
            self.tools.get_console_logs,
            lambda result: len(result.get("logs") or []) >= 3
        ))
        network_logs = logs_of(await self.poll_until(
            self.tools.get_network_logs,
            lambda result: any(
                log.get("url") == self.config.fetch_test_url for log in result.get("logs") or []
            )
        ))

        expect(console_logs, "Expected console logs from combined test")
        expect(network_logs, "Expected network logs from combined test")
        print(f"   Combined test: {len(console_logs)} console logs, {len(network_logs)} network logs")
