"""
Browser service for JS-heavy ordering pages.

Drives one isolated Playwright page from a URL to a full-page screenshot
that should show the menu:

1. Navigate to the URL without its fragment (DOM ready, then network idle)
2. Click through ordering/consent prompts
3. Activate the fragment as a client-side route, then prompts again
4. Scroll progressively so lazy sections load
5. If the page still looks empty, fall back to the site root and its
   Order/Menu link
6. Take one full-page screenshot

Every step in 1-5 is best-effort: a missing button or a slow script only
produces a FAILED/SKIPPED outcome, never an exception. Only browser setup
and the final screenshot can fail the request.
"""
import io
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import (
    AsyncContextManager,
    AsyncIterator,
    Awaitable,
    Callable,
    Iterable,
    List,
    Optional,
    Protocol,
    Tuple,
)
from urllib.parse import urlparse

from PIL import Image
from playwright.async_api import Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from config import Settings, settings as default_settings
from models import BrowserEngine, ExtractionRequest
from services.exceptions import BrowserSetupError, CaptureError

logger = logging.getLogger(__name__)


# Interstitial prompts, in click order
COAX_SELECTORS = [
    'a:has-text("Order Now")',
    'button:has-text("Order Now")',
    'button:has-text("Start order")',
    'button:has-text("Pickup")',
    'button:has-text("Delivery")',
    'button:has-text("ASAP")',
    'button:has-text("Continue")',
]

# Links tried on the site root when the target page looks empty
FALLBACK_SELECTORS = [
    'a:has-text("Order Online")',
    'a:has-text("Order")',
    'a:has-text("Menu")',
    'button:has-text("Order Online")',
    'button:has-text("Order")',
    'button:has-text("Menu")',
]

CHROMIUM_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-dev-shm-usage",
]

# Hide the two most common automation tells
STEALTH_SCRIPT = """
(() => {
    try {
        Object.defineProperty(navigator, 'webdriver', { get: () => false });
        Object.defineProperty(navigator, 'platform', { get: () => 'MacIntel' });
    } catch (e) {}
})();
"""


class StepOutcome(Enum):
    """Result of one best-effort browser step."""
    DONE = "done"          # Step completed
    SKIPPED = "skipped"    # Nothing to do (e.g. element not visible)
    FAILED = "failed"      # Step raised or timed out; ignored


@dataclass
class PageCapture:
    """Full-page PNG screenshot with its pixel size."""
    png: bytes
    width: int
    height: int

    @classmethod
    def from_png(cls, png: bytes) -> "PageCapture":
        with Image.open(io.BytesIO(png)) as img:
            width, height = img.size
        return cls(png=png, width=width, height=height)


class BrowserPage(Protocol):
    """Narrow page capability the navigator needs."""

    async def goto(self, url: str, timeout_ms: int) -> None: ...

    async def wait_for_network_idle(self, timeout_ms: int) -> None: ...

    async def is_visible(self, selector: str, timeout_ms: int) -> bool: ...

    async def click(self, selector: str, timeout_ms: int) -> None: ...

    async def set_hash(self, fragment: str) -> None: ...

    async def scroll_by(self, dy: int) -> None: ...

    async def wait(self, ms: int) -> None: ...

    async def visible_text(self) -> str: ...

    async def screenshot(self) -> bytes: ...


PageFactory = Callable[[ExtractionRequest, Settings], AsyncContextManager[BrowserPage]]


class PlaywrightPage:
    """BrowserPage backed by a Playwright page."""

    def __init__(self, page: Page):
        self._page = page

    async def goto(self, url: str, timeout_ms: int) -> None:
        # DOM ready only; pages with polling never reach "load"
        await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)

    async def wait_for_network_idle(self, timeout_ms: int) -> None:
        await self._page.wait_for_load_state("networkidle", timeout=timeout_ms)

    async def is_visible(self, selector: str, timeout_ms: int) -> bool:
        locator = self._page.locator(selector).first
        try:
            await locator.wait_for(state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        return True

    async def click(self, selector: str, timeout_ms: int) -> None:
        await self._page.locator(selector).first.click(timeout=timeout_ms)

    async def set_hash(self, fragment: str) -> None:
        await self._page.evaluate("h => { location.hash = h; }", fragment)

    async def scroll_by(self, dy: int) -> None:
        await self._page.evaluate("y => window.scrollBy(0, y)", dy)

    async def wait(self, ms: int) -> None:
        await self._page.wait_for_timeout(ms)

    async def visible_text(self) -> str:
        text = await self._page.evaluate(
            "() => (document.body ? document.body.innerText || '' : '')"
        )
        return text or ""

    async def screenshot(self) -> bytes:
        return await self._page.screenshot(full_page=True, type="png")


async def _shutdown(browser, playwright) -> None:
    """Close browser and driver, logging (not raising) cleanup errors."""
    try:
        if browser:
            await browser.close()
    except Exception as e:
        logger.error(f"[NAV] Browser close error: {e}")
    try:
        if playwright:
            await playwright.stop()
    except Exception as e:
        logger.error(f"[NAV] Playwright stop error: {e}")


@asynccontextmanager
async def open_playwright_page(
    request: ExtractionRequest,
    config: Settings,
) -> AsyncIterator[BrowserPage]:
    """
    Launch a dedicated browser for one request and yield its page.

    The browser process and the Playwright driver are released on every
    exit path. Setup problems are raised as BrowserSetupError.
    """
    playwright = None
    browser = None

    try:
        playwright = await async_playwright().start()
        launcher = getattr(playwright, request.engine.value)

        logger.info(f"[NAV] Launching {request.engine.value} (headless={request.headless})")
        browser = await launcher.launch(
            headless=request.headless,
            args=CHROMIUM_ARGS if request.engine == BrowserEngine.CHROMIUM else [],
        )

        context_options = {
            "viewport": {"width": config.viewport_width, "height": config.viewport_height},
            "user_agent": config.user_agent,
        }
        coordinates = request.coordinates
        if coordinates:
            lat, lon = coordinates
            context_options["geolocation"] = {"latitude": lat, "longitude": lon}
            context_options["permissions"] = ["geolocation"]

        context = await browser.new_context(**context_options)
        page = await context.new_page()
        await page.add_init_script(script=STEALTH_SCRIPT)

    except Exception as e:
        await _shutdown(browser, playwright)
        raise BrowserSetupError(f"Could not start {request.engine.value}: {e}") from e

    try:
        yield PlaywrightPage(page)
    finally:
        await _shutdown(browser, playwright)
        logger.debug("[NAV] Browser closed")


def split_fragment(url: str) -> Tuple[str, str]:
    """Split "https://x/menu#/store/1" into ("https://x/menu", "#/store/1")."""
    base, sep, fragment = url.partition("#")
    if not sep or not fragment:
        return base, ""
    return base, f"#{fragment}"


def root_url(url: str) -> str:
    """Scheme and host of a URL, path stripped."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}/"


def is_content_sufficient(
    text: str,
    min_chars: int = 200,
    no_content_phrases: Iterable[str] = (),
) -> bool:
    """Does the rendered page text look like it holds real content?"""
    lowered = (text or "").lower()
    if len(lowered) < min_chars:
        return False
    return not any(phrase.lower() in lowered for phrase in no_content_phrases)


class MenuPageNavigator:
    """
    Turns an ExtractionRequest into one full-page capture.

    The page capability comes from ``page_factory`` so the sequence can be
    driven by a fake page in tests.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        page_factory: Optional[PageFactory] = None,
    ):
        self._config = config or default_settings
        self._page_factory = page_factory or open_playwright_page

    async def capture(self, request: ExtractionRequest) -> PageCapture:
        """
        Render the page and screenshot it.

        Raises:
            BrowserSetupError: browser or context could not be created
            CaptureError: the screenshot failed
        """
        started = time.monotonic()

        async with self._page_factory(request, self._config) as page:
            await self._reveal_menu(page, request)

            try:
                png = await page.screenshot()
            except Exception as e:
                raise CaptureError(f"Screenshot failed: {e}") from e

        try:
            capture = PageCapture.from_png(png)
        except Exception as e:
            raise CaptureError(f"Screenshot is not a readable image: {e}") from e

        logger.info(
            f"[NAV] Captured {capture.width}x{capture.height}px "
            f"in {time.monotonic() - started:.1f}s"
        )
        return capture

    async def _reveal_menu(self, page: BrowserPage, request: ExtractionRequest) -> None:
        cfg = self._config
        base_url, fragment = split_fragment(request.url)

        logger.info(f"[NAV] Loading: {base_url}")
        await self._attempt("goto", page.goto(base_url, request.timeout_ms))
        await self._attempt("network idle", page.wait_for_network_idle(cfg.network_idle_timeout_ms))

        await self._coax(page)

        if fragment:
            logger.info(f"[NAV] Activating fragment {fragment}")
            await self._attempt("set hash", page.set_hash(fragment))
            await self._attempt("hash settle", page.wait(cfg.hash_settle_ms))
            await self._coax(page)

        await self._scroll(page, cfg.scroll_delay_ms, cfg.scroll_max_steps)
        await self._attempt("network idle", page.wait_for_network_idle(cfg.settle_idle_timeout_ms))

        text = await self._read_text(page)
        if is_content_sufficient(text, cfg.min_content_chars, cfg.no_content_phrases):
            logger.info(f"[NAV] Page has {len(text)} chars of text")
            return

        logger.info(f"[NAV] Insufficient content ({len(text)} chars), trying site root")
        await self._fallback(page, request.url)

    async def _fallback(self, page: BrowserPage, url: str) -> None:
        cfg = self._config
        root = root_url(url)

        await self._attempt("goto root", page.goto(root, cfg.root_navigation_timeout_ms))
        await self._attempt("network idle", page.wait_for_network_idle(cfg.settle_idle_timeout_ms))

        for selector in FALLBACK_SELECTORS:
            outcome = await self._try_click(
                page,
                selector,
                cfg.fallback_visible_timeout_ms,
                cfg.fallback_click_timeout_ms,
                cfg.fallback_settle_ms,
            )
            if outcome is not StepOutcome.SKIPPED:
                logger.info(f"[NAV] Fallback link {selector}: {outcome.value}")
                break
        else:
            logger.info(f"[NAV] No Order/Menu link on {root}")

        await self._scroll(page, cfg.fallback_scroll_delay_ms, cfg.fallback_scroll_max_steps)

    async def _coax(self, page: BrowserPage) -> List[str]:
        """Click every visible call-to-action prompt, in priority order."""
        cfg = self._config
        clicked = []

        for selector in COAX_SELECTORS:
            outcome = await self._try_click(
                page,
                selector,
                cfg.coax_visible_timeout_ms,
                cfg.coax_click_timeout_ms,
                cfg.coax_settle_ms,
            )
            if outcome is StepOutcome.DONE:
                clicked.append(selector)

        if clicked:
            logger.info(f"[NAV] Clicked prompts: {', '.join(clicked)}")
        return clicked

    async def _try_click(
        self,
        page: BrowserPage,
        selector: str,
        visible_timeout_ms: int,
        click_timeout_ms: int,
        settle_ms: int,
    ) -> StepOutcome:
        try:
            visible = await page.is_visible(selector, visible_timeout_ms)
        except Exception as e:
            logger.debug(f"[NAV] Visibility check failed for {selector}: {e}")
            return StepOutcome.SKIPPED

        if not visible:
            return StepOutcome.SKIPPED

        outcome = await self._attempt(f"click {selector}", page.click(selector, click_timeout_ms))
        await self._attempt("settle", page.wait(settle_ms))
        return outcome

    async def _scroll(self, page: BrowserPage, delay_ms: int, max_steps: int) -> int:
        """Scroll down in fixed steps; returns the number of steps taken."""
        step = self._config.scroll_step_px

        for i in range(max_steps):
            if await self._attempt("scroll", page.scroll_by(step)) is StepOutcome.FAILED:
                logger.debug(f"[NAV] Scrolling stopped after {i} steps")
                return i
            await self._attempt("scroll delay", page.wait(delay_ms))

        return max_steps

    async def _read_text(self, page: BrowserPage) -> str:
        try:
            return await page.visible_text() or ""
        except Exception as e:
            logger.warning(f"[NAV] Could not read page text: {e}")
            return ""

    async def _attempt(self, label: str, step: Awaitable) -> StepOutcome:
        try:
            await step
        except Exception as e:
            logger.debug(f"[NAV] {label} failed: {e}")
            return StepOutcome.FAILED
        return StepOutcome.DONE
