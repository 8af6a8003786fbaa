import pytest
from aiohttp import test_utils

from models import CanonicalItem, ExtractionMeta, ExtractionResult
from services.exceptions import CaptureError
from web import create_app


class FakeService:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests = []

    async def extract(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.result


RESULT = ExtractionResult(
    items=[CanonicalItem(item="Latte", size="12 oz", price=4.25, currency="USD")],
    meta=ExtractionMeta(chunks=2, engine="chromium", model="gpt-4o-mini"),
)


@pytest.mark.asyncio
async def test_health():
    async with test_utils.TestClient(test_utils.TestServer(create_app(FakeService()))) as client:
        resp = await client.get("/health")
        assert resp.status == 200
        assert await resp.json() == {"ok": True}


@pytest.mark.asyncio
async def test_extract_success():
    service = FakeService(result=RESULT)

    async with test_utils.TestClient(test_utils.TestServer(create_app(service))) as client:
        resp = await client.post(
            "/extract",
            json={"url": "https://cafe.example.com/#/menu", "engine": "firefox", "geo": "40.7,-74.0"},
        )
        assert resp.status == 200
        assert await resp.json() == {
            "items": [
                {"item": "Latte", "size": "12 oz", "price": 4.25, "description": "", "currency": "USD"},
            ],
            "meta": {"chunks": 2, "engine": "chromium", "model": "gpt-4o-mini"},
        }

    request = service.requests[0]
    assert request.url == "https://cafe.example.com/#/menu"
    assert request.engine.value == "firefox"
    assert request.coordinates == (40.7, -74.0)
    assert request.headless is True


@pytest.mark.asyncio
async def test_extract_failure_shape():
    service = FakeService(error=CaptureError("Screenshot failed: target closed"))

    async with test_utils.TestClient(test_utils.TestServer(create_app(service))) as client:
        resp = await client.post("/extract", json={"url": "https://a.com"})
        assert resp.status == 500
        assert await resp.json() == {
            "error": "extract_failed",
            "message": "Screenshot failed: target closed",
        }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"url": "https://a.com", "engine": "opera"},
        {"url": "https://a.com", "geo": "north"},
        {"url": "ftp://a.com"},
    ],
)
async def test_extract_rejects_invalid_body(body):
    service = FakeService(result=RESULT)

    async with test_utils.TestClient(test_utils.TestServer(create_app(service))) as client:
        resp = await client.post("/extract", json=body)
        assert resp.status == 400
        assert (await resp.json())["error"] == "invalid_request"

    assert service.requests == []


@pytest.mark.asyncio
async def test_extract_rejects_non_json():
    async with test_utils.TestClient(test_utils.TestServer(create_app(FakeService()))) as client:
        resp = await client.post("/extract", data="url=https://a.com")
        assert resp.status == 400

        resp = await client.post("/extract", json=["https://a.com"])
        assert resp.status == 400
