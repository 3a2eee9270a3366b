#!/usr/bin/env python3
"""
Supervisor for the MCP server child process
"""

import asyncio
import signal
import logging
from typing import Dict, List, Optional, Sequence

from mcp_harness.errors import ServerStartError

logger = logging.getLogger("mcp-harness.process")

# Messages the server prints on stderr while handling SIGINT
BENIGN_STDERR_MARKERS = ("Received SIGINT", "shutting down")

STDERR_CHUNK_SIZE = 4096


class ServerProcess:
    """Launches the server with piped stdio and shuts it down again"""

    def __init__(
        self,
        command: Sequence[str],
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        startup_delay: float = 2.0,
        shutdown_grace: float = 1.0,
        benign_markers: Sequence[str] = BENIGN_STDERR_MARKERS
    ):
        """Initialize the supervisor

        Args:
            command: Executable and arguments of the server
            cwd: Working directory for the server
            env: Environment for the server, inherited when None
            startup_delay: Seconds to wait after spawning before returning from start()
            shutdown_grace: Seconds to wait after SIGINT before SIGKILL
            benign_markers: stderr substrings that are not reported as errors
        """
        self.command = list(command)
        self.cwd = cwd
        self.env = env
        self.startup_delay = startup_delay
        self.shutdown_grace = shutdown_grace
        self.benign_markers = tuple(benign_markers)
        self.process: Optional[asyncio.subprocess.Process] = None
        self.stderr_chunks: List[str] = []
        self._stderr_task: Optional[asyncio.Task] = None

    @property
    def stdin(self) -> Optional[asyncio.StreamWriter]:
        return self.process.stdin if self.process else None

    @property
    def stdout(self) -> Optional[asyncio.StreamReader]:
        return self.process.stdout if self.process else None

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process else None

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode if self.process else None

    @property
    def running(self) -> bool:
        return self.process is not None and self.process.returncode is None

    @property
    def stderr_output(self) -> str:
        return "".join(self.stderr_chunks)

    async def start(self):
        """Spawn the server and give it a fixed delay to come up"""
        if self.process is not None:
            raise ServerStartError("Server process already started")

        logger.info(f"Starting server: {' '.join(self.command)}")
        try:
            self.process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.cwd,
                env=self.env
            )
        except OSError as e:
            raise ServerStartError(f"Failed to launch server {self.command}: {e}") from e

        self._stderr_task = asyncio.ensure_future(self._watch_stderr())
        logger.info(f"Server started (PID: {self.process.pid})")

        # No readiness handshake exists, so this is a plain sleep
        await asyncio.sleep(self.startup_delay)

        if self.process.returncode is not None:
            raise ServerStartError(
                f"Server exited during startup with code {self.process.returncode}"
            )

    async def _watch_stderr(self):
        """Report server stderr output, skipping expected shutdown chatter"""
        stream = self.process.stderr
        while True:
            chunk = await stream.read(STDERR_CHUNK_SIZE)
            if not chunk:
                break

            message = chunk.decode("utf-8", errors="replace")
            self.stderr_chunks.append(message)

            if any(marker in message for marker in self.benign_markers):
                logger.debug(f"Server shutdown output: {message.strip()}")
            elif message.strip():
                logger.error(f"Server error: {message.strip()}")

    async def stop(self):
        """Send SIGINT, then SIGKILL if the server outlives the grace period"""
        if self.process is None:
            return

        if self.process.returncode is None:
            logger.info("Stopping server...")
            try:
                self.process.send_signal(signal.SIGINT)
            except ProcessLookupError:
                pass

            try:
                await asyncio.wait_for(self.process.wait(), self.shutdown_grace)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Server did not exit within {self.shutdown_grace}s of SIGINT, killing it"
                )
                try:
                    self.process.kill()
                except ProcessLookupError:
                    pass
                await self.process.wait()

        if self.process.stdin and not self.process.stdin.is_closing():
            self.process.stdin.close()

        if self._stderr_task is not None:
            try:
                await asyncio.wait_for(self._stderr_task, self.shutdown_grace)
            except asyncio.TimeoutError:
                self._stderr_task.cancel()
            self._stderr_task = None

        logger.info(f"Server stopped with code {self.process.returncode}")

    async def __aenter__(self) -> "ServerProcess":
        try:
            await self.start()
        except BaseException:
            await self.stop()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
