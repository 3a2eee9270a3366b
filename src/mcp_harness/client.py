#!/usr/bin/env python3
"""
MCP client that correlates line-delimited JSON-RPC responses with requests
"""

import json
import asyncio
import logging
import itertools
from typing import Dict, Any, List, Optional

from mcp_harness.errors import ProtocolError, RequestTimeoutError, ServerClosedError
from mcp_harness.models import JSONRPCRequest, ToolResult, unwrap_tool_result

logger = logging.getLogger("mcp-harness.client")

PROTOCOL_VERSION = "2024-11-05"

READ_CHUNK_SIZE = 65536


class MCPClient:
    """Sends requests over a server's stdin and matches responses from its stdout by id

    Any object with ``stdin`` (a StreamWriter) and ``stdout`` (a StreamReader)
    attributes can serve as the server, normally a ServerProcess.
    """

    def __init__(self, server, request_timeout: float = 30.0):
        """Initialize the client

        Args:
            server: Object exposing the server's stdin and stdout streams
            request_timeout: Seconds to wait for each response
        """
        self.server = server
        self.request_timeout = request_timeout
        self._ids = itertools.count(1)
        self._pending: Dict[int, asyncio.Future] = {}
        self._buffer = b""
        self._reader_task: Optional[asyncio.Task] = None
        self._closed_error: Optional[ServerClosedError] = None

    @property
    def pending_count(self) -> int:
        """Number of requests still waiting for a response"""
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed_error is not None

    def connect(self):
        """Start reading the server's stdout"""
        if self._reader_task is None:
            self._reader_task = asyncio.ensure_future(self._read_loop())

    async def close(self):
        """Stop reading and fail anything still pending"""
        if self._reader_task is not None:
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
            self._reader_task = None
        self._fail_pending(ServerClosedError("Client closed"))

    async def __aenter__(self) -> "MCPClient":
        self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # Reading

    async def _read_loop(self):
        stream = self.server.stdout
        try:
            while True:
                chunk = await stream.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                self.feed(chunk)
        except Exception as e:
            logger.exception("Reading server output failed")
            self._fail_pending(ServerClosedError(f"Reading server output failed: {e}"))
            return

        # The last response may arrive without a trailing newline
        tail, self._buffer = self._buffer, b""
        self._handle_line(tail)

        logger.info("Server closed its output stream")
        self._fail_pending(ServerClosedError("Server closed its output stream"))

    def feed(self, chunk: bytes):
        """Process a chunk of server output

        Complete lines are dispatched right away, a trailing partial line is
        kept until the rest of it arrives.
        """
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split(b"\n")
        for line in lines:
            self._handle_line(line)

    def _handle_line(self, raw: bytes):
        line = raw.decode("utf-8", errors="replace").strip()
        if not line:
            return

        try:
            message = json.loads(line)
        except (ValueError, RecursionError):
            # The server may print diagnostics on stdout
            logger.debug(f"Ignoring non-JSON output: {line[:200]}")
            return

        if not isinstance(message, dict):
            logger.debug(f"Ignoring non-object message: {line[:200]}")
            return

        message_id = message.get("id")
        if isinstance(message_id, bool) or not isinstance(message_id, int):
            logger.debug(f"Ignoring message without a request id: {line[:200]}")
            return

        future = self._pending.get(message_id)
        if future is None or future.done():
            logger.debug(f"Ignoring response for unknown or settled id {message_id}")
            return

        future.set_result(message)

    def _fail_pending(self, error: ServerClosedError):
        if self._closed_error is None:
            self._closed_error = error
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)

    # Writing

    async def _write(self, request: JSONRPCRequest):
        stdin = self.server.stdin
        try:
            stdin.write(request.to_line().encode("utf-8"))
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise ServerClosedError(f"Failed to write {request.method} to server: {e}") from e

    async def send(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Send a JSON-RPC request and wait for the response with the same id

        Args:
            method: JSON-RPC method name
            params: Method parameters

        Returns:
            The parsed response object

        Raises:
            RequestTimeoutError: No response within request_timeout
            ServerClosedError: The server went away before responding
        """
        if self._closed_error is not None:
            raise self._closed_error
        self.connect()

        request = JSONRPCRequest(id=next(self._ids), method=method, params=params or {})
        future = asyncio.get_running_loop().create_future()
        self._pending[request.id] = future

        logger.debug(f"Request {request.id}: {method}")
        try:
            await self._write(request)
            response = await asyncio.wait_for(future, self.request_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Request {request.id} ({method}) timed out after {self.request_timeout}s")
            raise RequestTimeoutError(method, self.request_timeout) from None
        finally:
            del self._pending[request.id]

        logger.debug(f"Response {request.id}: {'error' if 'error' in response else 'result'}")
        return response

    async def notify(self, method: str, params: Optional[Dict[str, Any]] = None):
        """Send a JSON-RPC notification, which gets no response"""
        if self._closed_error is not None:
            raise self._closed_error
        await self._write(JSONRPCRequest(method=method, params=params or {}))

    # MCP methods

    async def initialize(self, client_name: str = "mcp-harness", client_version: str = "0.1.0") -> Dict[str, Any]:
        """Perform the MCP initialize handshake

        Returns:
            The server's initialize result
        """
        response = await self.send("initialize", {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "clientInfo": {"name": client_name, "version": client_version}
        })
        if "error" in response:
            raise ProtocolError(f"Server rejected initialize: {response['error']}")

        await self.notify("notifications/initialized")
        return response.get("result") or {}

    async def list_tools(self) -> List[Dict[str, Any]]:
        """Return the tool descriptors advertised by the server"""
        response = await self.send("tools/list")
        result = response.get("result") or {}
        return result.get("tools", [])

    async def call_tool(self, name: str, args: Optional[Dict[str, Any]] = None) -> ToolResult:
        """Call a tool and return its successful result envelope

        Raises:
            ProtocolError: JSON-RPC error or malformed result
            ToolExecutionError: The tool reported success: false
        """
        response = await self.send("tools/call", {"name": name, "arguments": args or {}})
        return unwrap_tool_result(response, tool=name)
