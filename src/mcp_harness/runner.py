#!/usr/bin/env python3
"""
Runs scenario suites against a live server and reports the results
"""

import time
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from mcp_harness.client import MCPClient
from mcp_harness.config import HarnessConfig
from mcp_harness.errors import HarnessError
from mcp_harness.fixtures import LocalSite
from mcp_harness.process import ServerProcess
from mcp_harness.scenarios import SUITES, ScenarioSuite
from mcp_harness.tools import BrowserTools

logger = logging.getLogger("mcp-harness.runner")


@dataclass
class TestOutcome:
    suite: str
    name: str
    passed: bool
    error: Optional[str] = None
    duration: float = 0.0


class SuiteRunner:
    """Runs scenario tests one at a time, recording each outcome"""

    def __init__(self):
        self.outcomes: List[TestOutcome] = []

    @property
    def passed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.passed)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.passed)

    async def run_test(self, suite: ScenarioSuite, name: str, test) -> TestOutcome:
        """Run a single scenario test; failures are recorded, never raised"""
        print(f"\nRunning {suite.name}: {name}...")
        start = time.monotonic()
        try:
            await test()
        except Exception as e:
            outcome = TestOutcome(suite.name, name, False, f"{type(e).__name__}: {e}", time.monotonic() - start)
            logger.error(f"{suite.name}: {name} failed: {e}")
            print(f"FAILED ({e})")
        else:
            outcome = TestOutcome(suite.name, name, True, None, time.monotonic() - start)
            logger.info(f"{suite.name}: {name} passed in {outcome.duration:.2f}s")
            print("OK")

        self.outcomes.append(outcome)
        return outcome

    async def run_suite(self, suite: ScenarioSuite):
        """Run every test of a suite in order"""
        print(f"\n{suite.name} - {suite.description}")
        print("-" * 70)
        for name, test in suite.tests():
            await self.run_test(suite, name, test)

    def record_fatal(self, error: BaseException):
        """Count a harness failure that happened outside any test"""
        self.outcomes.append(TestOutcome("harness", "setup", False, f"{type(error).__name__}: {error}"))

    def report(self) -> int:
        """Print the summary and return the process exit code"""
        print("\n" + "=" * 70)
        print(f"RESULTS: {self.passed} passed, {self.failed} failed, {len(self.outcomes)} total")

        if self.failed > 0:
            print("\nFailed tests:")
            for outcome in self.outcomes:
                if not outcome.passed:
                    print(f"  {outcome.suite}: {outcome.name}: {outcome.error}")
            return 1

        if not self.outcomes:
            print("\nNo tests were run")
            return 1

        print("\nAll tests passed!")
        return 0


async def run_suites(config: HarnessConfig, suite_names: Sequence[str]) -> int:
    """Start the server, run the named suites and shut everything down

    Args:
        config: Harness configuration
        suite_names: Keys of SUITES, run in the given order

    Returns:
        0 when every test passed, 1 otherwise
    """
    unknown = [name for name in suite_names if name not in SUITES]
    if unknown:
        raise ValueError(f"Unknown suites: {', '.join(unknown)}")

    runner = SuiteRunner()
    site = LocalSite() if config.local_site else None
    server = ServerProcess(
        config.server_command,
        cwd=config.server_cwd,
        startup_delay=config.startup_delay,
        shutdown_grace=config.shutdown_grace
    )
    client = MCPClient(server, request_timeout=config.request_timeout)

    try:
        if site is not None:
            config = config.with_base_url(await site.start())

        print("Starting Browser MCP Server...")
        await server.start()
        client.connect()

        info = await client.initialize()
        server_info = info.get("serverInfo", {})
        print(f"Connected to {server_info.get('name', 'server')} {server_info.get('version', '')}".rstrip())

        for name in suite_names:
            await runner.run_suite(SUITES[name](client, config))

    except Exception as e:
        logger.exception("Harness run failed")
        print(f"\nTest run failed: {e}")
        runner.record_fatal(e)
    finally:
        if server.running and not client.closed:
            try:
                await BrowserTools(client).close_browser()
            except HarnessError as e:
                logger.warning(f"close_browser failed during cleanup: {e}")

        await client.close()
        await server.stop()
        if site is not None:
            await site.stop()

        if server.stderr_output.strip():
            logger.debug(f"Server stderr output:\n{server.stderr_output}")

    return runner.report()
