"""
Stdio test harness for Browser MCP servers.

Launches the server as a child process, talks line-delimited JSON-RPC to it
and runs scenario suites against its browser tools.
"""

from .client import MCPClient
from .config import HarnessConfig, configure_logging
from .errors import (
    HarnessError,
    ProtocolError,
    RequestTimeoutError,
    ServerClosedError,
    ServerStartError,
    ToolExecutionError,
    ToolInvocationError,
)
from .models import ToolResult, unwrap_tool_result
from .process import ServerProcess
from .tools import BrowserTools

__all__ = [
    'MCPClient',
    'HarnessConfig',
    'configure_logging',
    'HarnessError',
    'ProtocolError',
    'RequestTimeoutError',
    'ServerClosedError',
    'ServerStartError',
    'ToolExecutionError',
    'ToolInvocationError',
    'ToolResult',
    'unwrap_tool_result',
    'ServerProcess',
    'BrowserTools',
]
