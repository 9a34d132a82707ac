"""
ScorePress Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable fakes for the two external systems (MongoDB and
       remote HTTP hosts) plus builders for real image and PDF bytes.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Overview:
    ├── student_store:   In-memory stand-in for the studentdetails collection
    ├── mock_collection: AsyncMock collection for failure injection
    ├── upstream:        Scriptable fake remote host (httpx.MockTransport)
    ├── catalog:         8 fake catalog URLs on the fake host
    ├── make_png:        PNG bytes built with Pillow
    ├── make_pdf:        PDF bytes with blank pages of chosen widths (pypdf)
    └── test_client:     HTTPX AsyncClient wired to the app with overrides
"""

import asyncio
import io
import os
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from PIL import Image
from pypdf import PdfWriter


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any app imports
os.environ["MONGO_DB_URL"] = "mongodb://test-host:27017"
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# Fakes
# ══════════════════════════════════════════════════════════════════════════

class InMemoryCollection:
    """
    Minimal async collection: insert_one / find_one with equality filters.

    Enough to exercise save-then-lookup round trips without a MongoDB server.
    """

    name = "studentdetails"

    def __init__(self):
        self.documents: List[Dict[str, Any]] = []

    async def insert_one(self, document: Dict[str, Any]):
        stored = {**document, "_id": ObjectId()}
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for doc in self.documents:
            if all(doc.get(key) == value for key, value in query.items()):
                return dict(doc)
        return None

    async def create_index(self, *args, **kwargs) -> str:
        return kwargs.get("name", "index")


class FakeUpstream:
    """
    Scriptable remote host for httpx.MockTransport.

    add(url, content=..., status=..., delay=...) registers a response.
    `content` may be an exception instance, which is raised instead
    (e.g. httpx.ConnectError). Unregistered URLs answer 404.
    Every requested URL is appended to `requested`, in request order.
    """

    def __init__(self):
        self._routes: Dict[str, Dict[str, Any]] = {}
        self.requested: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def add(self, url: str, content: Any = b"", status: int = 200, delay: float = 0.0) -> None:
        self._routes[url] = {"content": content, "status": status, "delay": delay}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            route = self._routes.get(url)
            if route is None:
                return httpx.Response(404, content=b"not found")
            if route["delay"]:
                await asyncio.sleep(route["delay"])
            if isinstance(route["content"], Exception):
                raise route["content"]
            return httpx.Response(route["status"], content=route["content"])
        finally:
            self.in_flight -= 1

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def student_store():
    """Fresh in-memory studentdetails collection for each test."""
    return InMemoryCollection()


@pytest.fixture
def mock_collection():
    """
    AsyncMock collection for tests that need to inject driver failures.

    Usage:
        mock_collection.insert_one.side_effect = ServerSelectionTimeoutError("down")
    """
    collection = AsyncMock()
    collection.name = "studentdetails"
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.find_one = AsyncMock(return_value=None)
    collection.create_index = AsyncMock(return_value="idx_first_name")
    return collection


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest_asyncio.fixture
async def http_client(upstream):
    """httpx client whose every request is answered by `upstream`."""
    client = upstream.client()
    yield client
    await client.aclose()


@pytest.fixture
def catalog():
    """Eight catalog URLs on the fake host, mirroring the production catalog size."""
    return [f"https://pdfs.test/section_{i:02d}.pdf" for i in range(1, 9)]


@pytest.fixture
def make_png():
    """
    Build real PNG bytes.

    Usage:
        data = make_png()                      # 40x30 red
        data = make_png(size=(10, 80), color="blue")
    """
    def _make(size=(40, 30), color="red") -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", size, color).save(buffer, format="PNG")
        return buffer.getvalue()
    return _make


@pytest.fixture
def make_pdf():
    """
    Build a PDF whose pages are blank with the given widths.

    Distinct widths let tests tell which source document a merged page came from:
        make_pdf([101, 102]) → 2 pages, 101pt and 102pt wide
    """
    def _make(widths, height: float = 200) -> bytes:
        writer = PdfWriter()
        for width in widths:
            writer.add_blank_page(width=width, height=height)
        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()
    return _make


@pytest_asyncio.fixture
async def test_client(student_store, http_client, catalog):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    ASGITransport does not run the lifespan handler, so the real Mongo and
    httpx clients are never created; dependencies are overridden instead:
        - studentdetails collection → student_store (in-memory)
        - upstream HTTP client      → http_client (FakeUpstream)
        - combiner catalog          → `catalog` fixture

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    from scorepress.database import get_student_collection
    from scorepress.main import app
    from scorepress.routes.pdfs import get_http_client, get_pdf_combiner
    from scorepress.services.pdf_combiner import PdfCombiner

    app.dependency_overrides[get_student_collection] = lambda: student_store
    app.dependency_overrides[get_http_client] = lambda: http_client
    app.dependency_overrides[get_pdf_combiner] = lambda: PdfCombiner(
        catalog=catalog, client=http_client
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
