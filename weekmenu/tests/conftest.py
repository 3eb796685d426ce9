"""
Shared fixtures for the weekly menu test suite.

Provides:
- a fixed clock (Wednesday 2024-07-10, UTC) so week logic is deterministic
- an in-process fake menu server for sync client tests (httpx.MockTransport)
"""
import asyncio
import json
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx
import pytest

from weekmenu.logic.menu.week import empty_menu_document
from weekmenu.logic.menu.week import week_start as _week_start

UTC = ZoneInfo("UTC")
FIXED_NOW = datetime(2024, 7, 10, 15, 30, tzinfo=UTC)


def clock_at(moment: datetime):
    return lambda: moment


class FakeMenuServer:
    """Answers GET/POST /api/menu like the real service and records every POST."""

    def __init__(self, document=None):
        self.document = document or empty_menu_document(_week_start(FIXED_NOW).date())
        self.posts = []
        self.fail_posts = False
        self.fail_gets = False
        self.post_delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            if self.fail_gets:
                raise httpx.ConnectError("menu service down", request=request)
            return httpx.Response(200, json=self.document)

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.post_delay:
                await asyncio.sleep(self.post_delay)
            body = json.loads(request.content)
            self.posts.append(body)
            if self.fail_posts:
                return httpx.Response(500, json={"error": "Failed to save menu"})
            self.document = body
            return httpx.Response(200, json={"success": True})
        finally:
            self.in_flight -= 1

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url="http://menu.test")


@pytest.fixture
def fixed_clock():
    return clock_at(FIXED_NOW)


@pytest.fixture
def fake_server():
    return FakeMenuServer()
