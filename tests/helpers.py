"""
Fakes for the extraction pipeline tests.

No real browser or network is used: FakePage stands in for the Playwright
page and FakeVision for the inference service.
"""
import io
import json
from contextlib import asynccontextmanager
from typing import Iterable, List, Optional, Sequence

from PIL import Image


def make_png(width: int = 40, height: int = 100, mode: str = "RGB") -> bytes:
    """PNG whose rows all differ, so misplaced bands are detectable."""
    img = Image.new(mode, (width, height))
    pixels = []
    for y in range(height):
        for x in range(width):
            if mode == "L":
                pixels.append((y * 7 + x) % 256)
            else:
                pixels.append((y % 256, (y // 256) % 256, (x * 5) % 256))
    img.putdata(pixels)

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


class FakePage:
    """In-memory BrowserPage recording what the navigator asked for."""

    def __init__(
        self,
        text: str = "",
        visible: Iterable[str] = (),
        failing_clicks: Iterable[str] = (),
        failing: Iterable[str] = (),
        screenshot_png: Optional[bytes] = None,
        screenshot_error: Optional[Exception] = None,
    ):
        self.text = text
        self.visible = set(visible)
        self.failing_clicks = set(failing_clicks)
        self.failing = set(failing)  # method names that raise
        self.screenshot_png = screenshot_png if screenshot_png is not None else make_png()
        self.screenshot_error = screenshot_error

        self.calls: List[tuple] = []
        self.closed = False

    def _maybe_fail(self, name: str) -> None:
        if name in self.failing:
            raise TimeoutError(f"{name} timed out")

    @property
    def gotos(self) -> List[str]:
        return [c[1] for c in self.calls if c[0] == "goto"]

    @property
    def clicks(self) -> List[str]:
        return [c[1] for c in self.calls if c[0] == "click"]

    @property
    def scrolls(self) -> int:
        return sum(1 for c in self.calls if c[0] == "scroll_by")

    async def goto(self, url: str, timeout_ms: int) -> None:
        self.calls.append(("goto", url, timeout_ms))
        self._maybe_fail("goto")

    async def wait_for_network_idle(self, timeout_ms: int) -> None:
        self.calls.append(("network_idle", timeout_ms))
        self._maybe_fail("wait_for_network_idle")

    async def is_visible(self, selector: str, timeout_ms: int) -> bool:
        self._maybe_fail("is_visible")
        return selector in self.visible

    async def click(self, selector: str, timeout_ms: int) -> None:
        self.calls.append(("click", selector))
        if selector in self.failing_clicks:
            raise RuntimeError(f"element detached: {selector}")

    async def set_hash(self, fragment: str) -> None:
        self.calls.append(("set_hash", fragment))
        self._maybe_fail("set_hash")

    async def scroll_by(self, dy: int) -> None:
        self.calls.append(("scroll_by", dy))
        self._maybe_fail("scroll_by")

    async def wait(self, ms: int) -> None:
        self._maybe_fail("wait")

    async def visible_text(self) -> str:
        self.calls.append(("visible_text",))
        self._maybe_fail("visible_text")
        return self.text

    async def screenshot(self) -> bytes:
        self.calls.append(("screenshot",))
        if self.screenshot_error:
            raise self.screenshot_error
        return self.screenshot_png


def page_factory_for(page: FakePage):
    """Session factory handing out ``page`` and marking it closed on exit."""

    @asynccontextmanager
    async def factory(request, config):
        try:
            yield page
        finally:
            page.closed = True

    return factory


class FakeVision:
    """VisionInference returning a canned answer."""

    def __init__(self, content: str = '{"items": []}', error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls: List[tuple] = []

    async def parse_images(self, images: Sequence[bytes], model: str) -> str:
        self.calls.append((list(images), model))
        if self.error:
            raise self.error
        return self.content


def items_json(*items: dict) -> str:
    return json.dumps({"items": list(items)})


LONG_MENU_TEXT = "Latte 12 oz 4.25\nMocha 12 oz 4.75\n" * 20
