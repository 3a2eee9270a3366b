#!/usr/bin/env python3
"""
Exceptions raised by the MCP test harness
"""

from typing import Optional


class HarnessError(Exception):
    """Base class for all harness errors"""


class ServerStartError(HarnessError):
    """The server process could not be launched or died during startup"""


class ServerClosedError(HarnessError):
    """The server closed its output stream or stopped accepting input"""


class RequestTimeoutError(HarnessError):
    """No response arrived for a request within the timeout window"""

    def __init__(self, method: str, timeout: float):
        super().__init__(f"Timeout waiting for response to {method}")
        self.method = method
        self.timeout = timeout


class ToolInvocationError(HarnessError):
    """A tools/call request did not produce a successful tool result"""

    def __init__(self, message: str, tool: Optional[str] = None):
        super().__init__(message)
        self.tool = tool


class ProtocolError(ToolInvocationError):
    """The JSON-RPC response carried an error or a malformed result"""

    def __init__(self, message: str, tool: Optional[str] = None, code: Optional[int] = None):
        super().__init__(message, tool)
        self.code = code


class ToolExecutionError(ToolInvocationError):
    """The tool ran but reported success: false in its result envelope"""

    def __init__(self, message: str, tool: Optional[str] = None, error_type: Optional[str] = None):
        super().__init__(message, tool)
        self.error_type = error_type
