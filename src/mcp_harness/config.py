#!/usr/bin/env python3
"""
Harness configuration and logging setup
"""

import os
import re
import sys
import shlex
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_SERVER_COMMAND = ["node", "dist/server.js"]


class HarnessConfig(BaseModel):
    """Settings shared by the supervisor, the client and the scenario suites"""

    server_command: List[str] = Field(default_factory=lambda: list(DEFAULT_SERVER_COMMAND))
    server_cwd: Optional[str] = None

    request_timeout: float = 30.0
    startup_delay: float = 2.0
    shutdown_grace: float = 1.0
    operation_delay: float = 1.0
    poll_interval: float = 0.25
    poll_timeout: float = 10.0

    console_test_url: str = "https://httpbin.org/html"
    network_test_url: str = "https://httpbin.org/json"
    fetch_test_url: str = "https://httpbin.org/status/200"
    first_page_url: str = "https://httpbin.org/"
    second_page_url: str = "https://httpbin.org/html"
    url_pattern: str = r"httpbin\.org"
    navigation_timeout: int = 10000

    log_dir: str = "logs"
    debug: bool = False
    local_site: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides: Any) -> "HarnessConfig":
        """Build a config from MCP_* environment variables

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Values that win over the environment

        Returns:
            HarnessConfig instance
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        if env.get("MCP_SERVER_COMMAND"):
            values["server_command"] = shlex.split(env["MCP_SERVER_COMMAND"])
        if env.get("MCP_SERVER_CWD"):
            values["server_cwd"] = env["MCP_SERVER_CWD"]
        if env.get("MCP_REQUEST_TIMEOUT"):
            values["request_timeout"] = _env_float(env, "MCP_REQUEST_TIMEOUT")
        if env.get("MCP_STARTUP_DELAY"):
            values["startup_delay"] = _env_float(env, "MCP_STARTUP_DELAY")
        if env.get("MCP_LOG_DIR"):
            values["log_dir"] = env["MCP_LOG_DIR"]
        if env.get("MCP_DEBUG"):
            values["debug"] = env["MCP_DEBUG"] not in ("0", "false", "False", "")

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def with_base_url(self, base_url: str) -> "HarnessConfig":
        """Return a copy whose scenario URLs point at a fixture site"""
        base = base_url.rstrip("/")
        host = urlsplit(base).netloc
        return self.model_copy(update={
            "console_test_url": f"{base}/html",
            "network_test_url": f"{base}/json",
            "fetch_test_url": f"{base}/status/200",
            "first_page_url": f"{base}/",
            "second_page_url": f"{base}/html",
            "url_pattern": re.escape(host),
        })


def _env_float(env: Dict[str, str], name: str) -> float:
    try:
        return float(env[name])
    except ValueError:
        raise ValueError(f"{name} must be a number, got {env[name]!r}") from None


def configure_logging(log_dir: str = "logs", debug: bool = False) -> Path:
    """Send harness logs to a timestamped file and warnings to stderr

    Args:
        log_dir: Directory for the log file
        debug: Log at DEBUG level and echo everything to stderr

    Returns:
        Path of the log file
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / f"mcp_harness_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # stdout carries the test report, diagnostics go to stderr
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    stream_handler.setLevel(logging.DEBUG if debug else logging.WARNING)

    logger = logging.getLogger("mcp-harness")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    return log_file
