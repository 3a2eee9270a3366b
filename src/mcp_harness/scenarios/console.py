#!/usr/bin/env python3
"""
Console log capture scenarios
"""

from mcp_harness.scenarios.base import ScenarioSuite, expect, logs_of

EMIT_CONSOLE_MESSAGES = """
    console.log("test log message");
    console.warn("test warning message");
    console.error("test error message");
"""


class ConsoleSuite(ScenarioSuite):
    """get_console_logs capture, filtering, limits and clearing"""

    name = "console"
    description = "Console log capture and filtering"

    def tests(self):
        return [
            ("Console Logging Basic Functionality", self.test_console_logging),
            ("Console Log Level Filtering", self.test_console_level_filter),
            ("Console Log Limit Parameter", self.test_console_limit),
            ("Clear Console Logs", self.test_clear_console_logs),
        ]

    async def seed_console_logs(self):
        """Start from an empty buffer holding one log, one warning and one error"""
        await self.tools.clear_console_logs()
        await self.tools.load_page(self.config.console_test_url, wait_until="domcontentloaded")
        await self.tools.evaluate_js(EMIT_CONSOLE_MESSAGES)
        await self.poll_until(
            self.tools.get_console_logs,
            lambda result: len(result.get("logs") or []) >= 3
        )

    async def test_console_logging(self):
        await self.seed_console_logs()

        logs = logs_of(await self.tools.get_console_logs())
        expect(logs, "Expected console logs to be captured")

        first = logs[0]
        expect(
            first.get("timestamp") and first.get("level") and first.get("text"),
            "Console log entries should have timestamp, level, and text"
        )
        print(f"   Captured {len(logs)} console log entries")

    async def test_console_level_filter(self):
        await self.seed_console_logs()

        logs = logs_of(await self.tools.get_console_logs(level="error"))
        expect(logs, "Expected the seeded console.error entry")
        others = [log for log in logs if log.get("level") != "error"]
        expect(not others, "Level filtering should only return error logs")
        print(f"   Filtered to {len(logs)} error logs")

    async def test_console_limit(self):
        await self.seed_console_logs()

        logs = logs_of(await self.tools.get_console_logs(limit=2))
        expect(len(logs) <= 2, "Limit parameter should restrict number of logs returned")
        print(f"   Limited to {len(logs)} logs")

    async def test_clear_console_logs(self):
        await self.seed_console_logs()

        for attempt in range(2):
            await self.tools.clear_console_logs()
            logs = logs_of(await self.tools.get_console_logs())
            expect(
                len(logs) == 0,
                f"Console logs should be empty after clearing (clear #{attempt + 1}, got {len(logs)})"
            )
        print("   Console logs cleared successfully")
