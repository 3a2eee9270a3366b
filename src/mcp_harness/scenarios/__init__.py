"""
Scenario suites run against a Browser MCP server
"""

from .base import ScenarioSuite, expect, same_url
from .console import ConsoleSuite
from .network import NetworkSuite
from .navigation import NavigationSuite
from .smoke import SmokeSuite

SUITES = {
    suite.name: suite
    for suite in (SmokeSuite, ConsoleSuite, NetworkSuite, NavigationSuite)
}

__all__ = [
    'ScenarioSuite',
    'expect',
    'same_url',
    'ConsoleSuite',
    'NetworkSuite',
    'NavigationSuite',
    'SmokeSuite',
    'SUITES',
]
