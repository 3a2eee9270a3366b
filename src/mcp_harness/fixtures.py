#!/usr/bin/env python3
"""
Local fixture site serving the pages the scenario suites visit
"""

import logging
from typing import Optional

from aiohttp import web

logger = logging.getLogger("mcp-harness.fixtures")

INDEX_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>MCP Harness Fixtures</title></head>
<body>
<h1>MCP Harness Fixtures</h1>
<ul>
<li><a href="/html">HTML page</a></li>
<li><a href="/json">JSON document</a></li>
<li><a href="/forms/post">HTML form</a></li>
</ul>
</body>
</html>
"""

HTML_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Herman Melville - Moby-Dick</title></head>
<body>
<h1>Herman Melville - Moby-Dick</h1>
<p>Availing himself of the mild, summer-cool weather that now reigned in these latitudes.</p>
</body>
</html>
"""

FORM_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Order form</title></head>
<body>
<form method="post" action="/post">
<label for="custname">Customer name</label>
<input id="custname" name="custname">
<button type="submit">Submit order</button>
</form>
</body>
</html>
"""

JSON_DOCUMENT = {
    "slideshow": {
        "author": "Yours Truly",
        "title": "Sample Slide Show",
        "slides": [
            {"title": "Wake up to WonderWidgets!", "type": "all"},
            {"title": "Overview", "type": "all", "items": ["Why WonderWidgets are great", "Who buys WonderWidgets"]}
        ]
    }
}


class LocalSite:
    """An aiohttp site on 127.0.0.1 with httpbin-like routes"""

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self.host = host
        self.port = port
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None
        self.base_url: Optional[str] = None

    async def start(self) -> str:
        """Start serving and return the base URL"""
        self.app = web.Application()
        self.app.router.add_get("/", self.handle_index)
        self.app.router.add_get("/html", self.handle_html)
        self.app.router.add_get("/json", self.handle_json)
        self.app.router.add_get("/forms/post", self.handle_form)
        self.app.router.add_route("*", "/status/{code}", self.handle_status)

        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, self.host, self.port)
        await self.site.start()

        # Resolve the ephemeral port picked by the OS
        port = self.runner.addresses[0][1]
        self.base_url = f"http://{self.host}:{port}"
        logger.info(f"Fixture site listening on {self.base_url}")
        return self.base_url

    async def stop(self):
        if self.runner is not None:
            await self.runner.cleanup()
            logger.info("Fixture site stopped")
        self.runner = None
        self.site = None
        self.app = None

    async def __aenter__(self) -> "LocalSite":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def handle_index(self, request: web.Request) -> web.Response:
        return web.Response(text=INDEX_PAGE, content_type="text/html")

    async def handle_html(self, request: web.Request) -> web.Response:
        return web.Response(text=HTML_PAGE, content_type="text/html")

    async def handle_form(self, request: web.Request) -> web.Response:
        return web.Response(text=FORM_PAGE, content_type="text/html")

    async def handle_json(self, request: web.Request) -> web.Response:
        return web.json_response(JSON_DOCUMENT)

    async def handle_status(self, request: web.Request) -> web.Response:
        try:
            code = int(request.match_info["code"])
        except ValueError:
            return web.Response(status=400, text="Invalid status code")
        if not 200 <= code <= 599:
            return web.Response(status=400, text="Invalid status code")
        return web.Response(status=code)
