#!/usr/bin/env python3
"""
Unit tests for the MCP client's request/response correlation
Feeds server output by hand instead of launching a process
"""

import sys
import json
import asyncio
import unittest
from pathlib import Path

# Ensure the src directory is in the path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from mcp_harness.client import MCPClient
from mcp_harness.errors import (
    ProtocolError,
    RequestTimeoutError,
    ServerClosedError,
    ToolExecutionError,
    ToolInvocationError,
)


class RecordingWriter:
    """Collects what the client writes to the server's stdin"""

    def __init__(self):
        self.data = b""

    def write(self, data: bytes):
        self.data += data

    async def drain(self):
        pass

    @property
    def messages(self):
        return [json.loads(line) for line in self.data.decode("utf-8").splitlines() if line.strip()]


class BrokenWriter(RecordingWriter):
    async def drain(self):
        raise BrokenPipeError("Broken pipe")


class StubServer:
    """Stands in for ServerProcess with in-memory streams"""

    def __init__(self, writer=None):
        self.stdout = asyncio.StreamReader()
        self.stdin = writer or RecordingWriter()

    def reply(self, *messages, raw: str = ""):
        text = raw + "".join(json.dumps(message) + "\n" for message in messages)
        self.stdout.feed_data(text.encode("utf-8"))


def tool_response(request_id, envelope):
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "result": {"content": [{"type": "text", "text": json.dumps(envelope)}]}
    }


class ClientTestCase(unittest.TestCase):
    """Runs each test coroutine on a fresh event loop"""

    def setUp(self):
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

    def tearDown(self):
        self.loop.close()

    def run_async(self, coro):
        return self.loop.run_until_complete(coro)

    async def wait_for_requests(self, server, count):
        for _ in range(100):
            if len(server.stdin.messages) >= count:
                return server.stdin.messages
            await asyncio.sleep(0)
        self.fail(f"Client sent {len(server.stdin.messages)} requests, expected {count}")


class TestCorrelation(ClientTestCase):
    """Matching responses to requests by id"""

    def test_ids_increase_from_one(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)

            for expected_id in (1, 2, 3):
                task = asyncio.ensure_future(client.send("debug/echo", {"n": expected_id}))
                messages = await self.wait_for_requests(server, expected_id)
                request = messages[-1]
                self.assertEqual(request["id"], expected_id)
                self.assertEqual(request["jsonrpc"], "2.0")
                self.assertEqual(request["method"], "debug/echo")
                server.reply({"jsonrpc": "2.0", "id": expected_id, "result": {"n": expected_id}})
                response = await task
                self.assertEqual(response["id"], expected_id)
                self.assertEqual(response["result"], {"n": expected_id})

            await client.close()

        self.run_async(_test())

    def test_separate_clients_have_separate_counters(self):
        async def _test():
            first = MCPClient(StubServer(), request_timeout=0.05)
            second = MCPClient(StubServer(), request_timeout=0.05)
            for client in (first, second):
                with self.assertRaises(RequestTimeoutError):
                    await client.send("ping")
            self.assertEqual(first.server.stdin.messages[0]["id"], 1)
            self.assertEqual(second.server.stdin.messages[0]["id"], 1)
            await first.close()
            await second.close()

        self.run_async(_test())

    def test_malformed_lines_are_skipped(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 1)

            server.reply(
                {"jsonrpc": "2.0", "id": 1, "result": {"ok": True}},
                raw="Server starting...\n{not valid json\n\n   \n[1, 2, 3]\n\"text\"\n{\"id\": [1]}\n"
            )
            response = await task
            self.assertEqual(response["result"], {"ok": True})
            await client.close()

        self.run_async(_test())

    def test_deeply_nested_noise_is_skipped(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 1)

            server.reply({"jsonrpc": "2.0", "id": 1, "result": {"ok": True}}, raw="[" * 100000 + "\n")
            response = await task
            self.assertEqual(response["result"], {"ok": True})

            # The reader survives and keeps matching responses
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 2)
            server.reply({"jsonrpc": "2.0", "id": 2, "result": {"ok": 2}})
            self.assertEqual((await task)["result"], {"ok": 2})
            self.assertFalse(client.closed)
            await client.close()

        self.run_async(_test())

    def test_concurrent_calls_resolve_out_of_order(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            tasks = [asyncio.ensure_future(client.send("debug/echo", {"n": n})) for n in range(3)]
            await self.wait_for_requests(server, 3)
            self.assertEqual(client.pending_count, 3)

            # All three responses in one chunk, reversed
            server.reply(*[
                {"jsonrpc": "2.0", "id": request_id, "result": {"id": request_id}}
                for request_id in (3, 2, 1)
            ])
            responses = await asyncio.gather(*tasks)
            self.assertEqual([response["result"]["id"] for response in responses], [1, 2, 3])
            self.assertEqual(client.pending_count, 0)
            await client.close()

        self.run_async(_test())

    def test_response_split_across_chunks(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 1)

            line = json.dumps({"jsonrpc": "2.0", "id": 1, "result": {"pong": True}}) + "\n"
            client.feed(line[:10].encode("utf-8"))
            await asyncio.sleep(0)
            self.assertFalse(task.done())
            client.feed(line[10:].encode("utf-8"))

            response = await task
            self.assertEqual(response["result"], {"pong": True})
            await client.close()

        self.run_async(_test())

    def test_duplicate_response_is_ignored(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 1)

            server.reply(
                {"jsonrpc": "2.0", "id": 1, "result": {"first": True}},
                {"jsonrpc": "2.0", "id": 1, "result": {"second": True}}
            )
            response = await task
            self.assertEqual(response["result"], {"first": True})
            await asyncio.sleep(0)
            self.assertEqual(client.pending_count, 0)
            await client.close()

        self.run_async(_test())

    def test_boolean_id_does_not_match(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=0.1)
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 1)

            server.reply({"jsonrpc": "2.0", "id": True, "result": {}})
            with self.assertRaises(RequestTimeoutError):
                await task
            await client.close()

        self.run_async(_test())


class TestFailures(ClientTestCase):
    """Timeouts and a server that goes away"""

    def test_timeout_names_method_and_cleans_up(self):
        async def _test():
            client = MCPClient(StubServer(), request_timeout=0.05)
            with self.assertRaises(RequestTimeoutError) as ctx:
                await client.send("tools/list")
            self.assertIn("tools/list", str(ctx.exception))
            self.assertEqual(ctx.exception.method, "tools/list")
            self.assertEqual(client.pending_count, 0)
            await client.close()

        self.run_async(_test())

    def test_late_response_after_timeout_is_ignored(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=0.05)
            with self.assertRaises(RequestTimeoutError):
                await client.send("ping")

            server.reply({"jsonrpc": "2.0", "id": 1, "result": {}})
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 2)
            server.reply({"jsonrpc": "2.0", "id": 2, "result": {"late": False}})
            response = await task
            self.assertEqual(response["id"], 2)
            await client.close()

        self.run_async(_test())

    def test_eof_fails_pending_requests(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 1)

            server.stdout.feed_eof()
            with self.assertRaises(ServerClosedError):
                await task
            self.assertTrue(client.closed)
            self.assertEqual(client.pending_count, 0)

            with self.assertRaises(ServerClosedError):
                await client.send("ping")
            await client.close()

        self.run_async(_test())

    def test_unterminated_last_response_before_eof(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 1)

            server.stdout.feed_data(json.dumps({"jsonrpc": "2.0", "id": 1, "result": {"ok": True}}).encode("utf-8"))
            server.stdout.feed_eof()
            response = await task
            self.assertEqual(response["result"], {"ok": True})
            self.assertTrue(client.closed)
            await client.close()

        self.run_async(_test())

    def test_read_error_fails_pending_requests(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=5)
            task = asyncio.ensure_future(client.send("ping"))
            await self.wait_for_requests(server, 1)

            with self.assertLogs("mcp-harness.client", level="ERROR"):
                server.stdout.set_exception(ConnectionResetError("Connection reset by peer"))
                with self.assertRaises(ServerClosedError) as ctx:
                    await task
            self.assertIn("Connection reset by peer", str(ctx.exception))

            with self.assertRaises(ServerClosedError):
                await client.send("ping")
            await client.close()

        self.run_async(_test())

    def test_write_failure_raises_server_closed(self):
        async def _test():
            client = MCPClient(StubServer(BrokenWriter()), request_timeout=1)
            with self.assertRaises(ServerClosedError):
                await client.send("ping")
            self.assertEqual(client.pending_count, 0)
            await client.close()

        self.run_async(_test())


class TestToolCalls(ClientTestCase):
    """Unwrapping tools/call responses"""

    async def call(self, server, client, response_for, name="load_page", args=None):
        task = asyncio.ensure_future(client.call_tool(name, args))
        messages = await self.wait_for_requests(server, 1)
        server.reply(response_for(messages[-1]["id"]))
        return await task

    def test_success_returns_envelope(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            result = await self.call(
                server, client,
                lambda request_id: tool_response(request_id, {"success": True, "data": {"url": "https://example.com"}}),
                args={"url": "https://example.com"}
            )
            self.assertTrue(result.success)
            self.assertEqual(result.get("url"), "https://example.com")

            request = server.stdin.messages[0]
            self.assertEqual(request["method"], "tools/call")
            self.assertEqual(request["params"], {"name": "load_page", "arguments": {"url": "https://example.com"}})
            await client.close()

        self.run_async(_test())

    def test_arguments_default_to_empty_object(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            await self.call(
                server, client,
                lambda request_id: tool_response(request_id, {"success": True, "data": {}}),
                name="get_current_url"
            )
            self.assertEqual(server.stdin.messages[0]["params"]["arguments"], {})
            await client.close()

        self.run_async(_test())

    def test_protocol_error(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            with self.assertRaises(ProtocolError) as ctx:
                await self.call(
                    server, client,
                    lambda request_id: {"jsonrpc": "2.0", "id": request_id,
                                        "error": {"code": -32601, "message": "Method not found"}}
                )
            self.assertIsInstance(ctx.exception, ToolInvocationError)
            self.assertIn("Method not found", str(ctx.exception))
            self.assertEqual(ctx.exception.code, -32601)
            self.assertEqual(ctx.exception.tool, "load_page")
            await client.close()

        self.run_async(_test())

    def test_application_error(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            with self.assertRaises(ToolExecutionError) as ctx:
                await self.call(
                    server, client,
                    lambda request_id: tool_response(request_id, {
                        "success": False,
                        "error": {"type": "INVALID_URL", "message": "Invalid URL: nope"}
                    })
                )
            self.assertIsInstance(ctx.exception, ToolInvocationError)
            self.assertEqual(str(ctx.exception), "Tool execution failed: Invalid URL: nope")
            self.assertEqual(ctx.exception.error_type, "INVALID_URL")
            await client.close()

        self.run_async(_test())

    def test_application_error_without_message(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            with self.assertRaises(ToolExecutionError) as ctx:
                await self.call(server, client, lambda request_id: tool_response(request_id, {"success": False}))
            self.assertEqual(str(ctx.exception), "Tool execution failed: Unknown error")
            await client.close()

        self.run_async(_test())


class TestHandshake(ClientTestCase):
    """initialize, notifications and tools/list"""

    def test_initialize_sends_notification(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            task = asyncio.ensure_future(client.initialize("unit-test", "9.9.9"))
            messages = await self.wait_for_requests(server, 1)
            self.assertEqual(messages[0]["method"], "initialize")
            self.assertEqual(messages[0]["params"]["protocolVersion"], "2024-11-05")
            self.assertEqual(messages[0]["params"]["clientInfo"], {"name": "unit-test", "version": "9.9.9"})

            server.reply({"jsonrpc": "2.0", "id": 1, "result": {"serverInfo": {"name": "stub"}}})
            result = await task
            self.assertEqual(result["serverInfo"]["name"], "stub")

            notification = server.stdin.messages[1]
            self.assertEqual(notification["method"], "notifications/initialized")
            self.assertNotIn("id", notification)
            self.assertEqual(client.pending_count, 0)
            await client.close()

        self.run_async(_test())

    def test_list_tools(self):
        async def _test():
            server = StubServer()
            client = MCPClient(server, request_timeout=1)
            task = asyncio.ensure_future(client.list_tools())
            await self.wait_for_requests(server, 1)
            server.reply({"jsonrpc": "2.0", "id": 1, "result": {"tools": [{"name": "go_back"}]}})
            self.assertEqual(await task, [{"name": "go_back"}])
            await client.close()

        self.run_async(_test())


if __name__ == "__main__":
    unittest.main()
