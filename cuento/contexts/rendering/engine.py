"""
Headless browser rendering engine.

Converts HTML documents to PDF buffers with Chromium (Playwright), so CSS
paged-media features (backgrounds, web fonts, page breaks) render exactly as
a browser lays them out.

One browser process is shared by every render call. It is launched lazily on
the first render, reused afterwards, and closed explicitly by its owner:

    uninitialized --ensure_started()--> running --shutdown()--> closed

A closed engine behaves like an uninitialized one: the next render relaunches.
Each render call opens its own page (with its own browser context), bounded by
a semaphore, and always closes it before returning or raising.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from playwright.async_api import async_playwright

from cuento.contexts.rendering.logger import (
    _log_debug,
    _log_info,
    _log_warning,
    log_browser_launched,
    log_pdf_captured,
    log_render_failure,
)
from cuento.exceptions import RenderError

# Launch flags for restricted/sandboxed hosts (containers, CI runners)
CHROMIUM_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
)

VIEWPORT = {"width": 1200, "height": 1600}
DEVICE_SCALE_FACTOR = 2

DEFAULT_NAVIGATION_TIMEOUT_S = 60.0
DEFAULT_MAX_CONCURRENT_PAGES = 4

ZERO_MARGINS = {"top": "0mm", "right": "0mm", "bottom": "0mm", "left": "0mm"}

FONTS_LOADED_EXPRESSION = "document.fonts.status === 'loaded'"


class EngineState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    CLOSED = "closed"


@dataclass(frozen=True)
class RenderOptions:
    """
    PDF capture options.

    Defaults give an A4 page with zero margins (the template controls layout),
    background printing on, and page size taken from the document's CSS.

    Attributes:
        format: Paper format
        margin: Page margins
        print_background: Print background colors and images
        prefer_css_page_size: Let CSS @page size win over `format`
        display_header_footer: Print the browser's header and footer
        overrides: Raw Playwright page.pdf() keyword arguments that win over everything above
    """

    format: str = "A4"
    margin: Mapping[str, str] = field(default_factory=lambda: dict(ZERO_MARGINS))
    print_background: bool = True
    prefer_css_page_size: bool = True
    display_header_footer: bool = False
    overrides: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_overrides(cls, pdf_options: Optional[Mapping[str, Any]] = None) -> "RenderOptions":
        """Default options with caller-supplied page.pdf() arguments layered on top."""
        return cls(overrides=dict(pdf_options or {}))

    def to_pdf_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for Playwright's page.pdf()."""
        kwargs: Dict[str, Any] = {
            "format": self.format,
            "margin": dict(self.margin),
            "print_background": self.print_background,
            "prefer_css_page_size": self.prefer_css_page_size,
            "display_header_footer": self.display_header_footer,
        }
        kwargs.update(self.overrides)
        return kwargs


class RenderingEngine:
    """
    Owner of the shared headless Chromium process.

    Usage:
        async with RenderingEngine() as engine:
            pdf_bytes = await engine.render_to_pdf(html)
    """

    def __init__(
        self,
        navigation_timeout_s: float = DEFAULT_NAVIGATION_TIMEOUT_S,
        max_concurrent_pages: int = DEFAULT_MAX_CONCURRENT_PAGES,
        launch_args: Sequence[str] = CHROMIUM_ARGS,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        """
        Initialize the engine without launching anything.

        Args:
            navigation_timeout_s: Bound on each content-load and font wait
            max_concurrent_pages: Ceiling on simultaneously open pages
            launch_args: Chromium command-line flags
            playwright_factory: Returns an object whose start() yields a Playwright driver
        """
        if max_concurrent_pages < 1:
            raise ValueError(f"max_concurrent_pages must be >= 1, got: {max_concurrent_pages}")

        self.navigation_timeout_s = navigation_timeout_s
        self.max_concurrent_pages = max_concurrent_pages
        self.launch_args = list(launch_args)
        self._playwright_factory = playwright_factory

        self._playwright = None
        self._browser = None
        self._state = EngineState.UNINITIALIZED
        self._start_lock = asyncio.Lock()
        self._page_slots = asyncio.Semaphore(max_concurrent_pages)

        self.launch_count = 0
        self.pages_in_flight = 0

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is EngineState.RUNNING

    async def __aenter__(self) -> "RenderingEngine":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    async def ensure_started(self):
        """
        Launch the browser if it is not running and return the shared handle.

        Safe under concurrency: callers racing here all wait for the same single
        launch and then observe the same browser.

        Raises:
            RenderError: If the driver or browser fails to start (phase 'launch')
        """
        if self._browser is not None:
            return self._browser

        async with self._start_lock:
            if self._browser is None:
                try:
                    self._playwright = await self._playwright_factory().start()
                    self._browser = await self._playwright.chromium.launch(
                        headless=True, args=self.launch_args
                    )
                except Exception as exc:
                    await self._stop_driver()
                    raise RenderError(
                        "Could not launch headless browser",
                        phase="launch",
                        original_error=exc,
                    ) from exc

                self.launch_count += 1
                self._state = EngineState.RUNNING
                log_browser_launched(self.launch_count, self.launch_args)

        return self._browser

    async def render_to_pdf(
        self,
        html: str,
        options: Union[RenderOptions, Mapping[str, Any], None] = None,
    ) -> bytes:
        """
        Render an HTML document to a PDF buffer in an isolated page.

        Steps: open page (fixed viewport) -> load content and wait for DOM and
        network idle -> wait for web fonts -> capture PDF -> close page.

        Args:
            html: Complete HTML document
            options: RenderOptions, or a mapping of page.pdf() overrides

        Returns:
            PDF bytes

        Raises:
            RenderError: Naming the failing phase ('launch', 'page', 'navigation', 'fonts', 'pdf')
        """
        if not isinstance(options, RenderOptions):
            options = RenderOptions.from_overrides(options)

        browser = await self.ensure_started()
        timeout_ms = self.navigation_timeout_s * 1000

        async with self._page_slots:
            start_time = time.perf_counter()
            self.pages_in_flight += 1
            page = None
            phase = "page"
            try:
                page = await browser.new_page(
                    viewport=dict(VIEWPORT), device_scale_factor=DEVICE_SCALE_FACTOR
                )

                phase = "navigation"
                await page.set_content(html, wait_until="domcontentloaded", timeout=timeout_ms)
                await page.wait_for_load_state("networkidle", timeout=timeout_ms)

                # Text reflows once web fonts arrive; capturing earlier breaks pagination
                phase = "fonts"
                await page.wait_for_function(FONTS_LOADED_EXPRESSION, timeout=timeout_ms)

                phase = "pdf"
                pdf_buffer = await page.pdf(**options.to_pdf_kwargs())
            except Exception as exc:
                log_render_failure(phase, exc, time.perf_counter() - start_time)
                raise RenderError(
                    f"PDF rendering failed during {phase}",
                    phase=phase,
                    original_error=exc,
                ) from exc
            finally:
                self.pages_in_flight -= 1
                if page is not None:
                    await self._close_page(page)

        log_pdf_captured(len(pdf_buffer), time.perf_counter() - start_time, self.pages_in_flight)
        return pdf_buffer

    async def shutdown(self) -> None:
        """Close the browser and driver if running. Calling it again is a no-op."""
        async with self._start_lock:
            if self._browser is None and self._playwright is None:
                return

            browser, self._browser = self._browser, None
            try:
                if browser is not None:
                    await browser.close()
            finally:
                await self._stop_driver()
                self._state = EngineState.CLOSED

        _log_info("Browser closed")

    async def _stop_driver(self) -> None:
        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            await playwright.stop()

    async def _close_page(self, page) -> None:
        try:
            await page.close()
        except Exception as exc:
            # The browser may already be gone; the render outcome stands either way
            _log_warning(f"Could not close page: {exc}")
        else:
            _log_debug("Page closed")
