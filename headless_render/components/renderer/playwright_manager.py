"""
Manages Playwright browser instances for HTML rendering.

This module provides the `PlaywrightManager` class, an asynchronous context manager
that launches a browser with the requested launch options, hands out pages, and
wraps the page-level operations the renderer needs: cookie injection, viewport
sizing, navigation under a timeout/wait policy, PDF printing and screenshots.
Leaving the `async with` block always closes the browser.
"""
from playwright.async_api import async_playwright, Playwright, Browser, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from typing import List, Optional, TYPE_CHECKING

from headless_render.core.exceptions import RendererError, NavigationError, NavigationTimeoutError
from headless_render.core.logger import get_logger
from headless_render.core.models import (
    Cookie,
    LaunchOptions,
    NavigationOptions,
    PdfOptions,
    ScreenshotOptions,
    Viewport,
)

if TYPE_CHECKING:
    from headless_render.core.config import ConfigurationManager

logger = get_logger(__name__)


class PlaywrightManager:
    """
    Asynchronous context manager for a single Playwright browser instance.

    Attributes:
        browser_type (str): The type of browser to launch (e.g., 'chromium').
        launch_options (LaunchOptions): Sandbox flags and extra browser arguments.
        playwright (Optional[Playwright]): The Playwright engine instance.
        browser (Optional[Browser]): The launched Playwright browser instance.
    """
    DEFAULT_BROWSER_TYPE = 'chromium'
    # Page.pdf and the sandbox switch exist only in Chromium.
    SUPPORTED_BROWSER_TYPES = ('chromium',)

    def __init__(self, launch_options: Optional[LaunchOptions] = None, config: Optional['ConfigurationManager'] = None):
        """
        Initializes the PlaywrightManager.

        Args:
            launch_options (Optional[LaunchOptions]): How to spawn the browser process.
                Defaults to a sandboxed launch with no extra arguments.
            config (Optional[ConfigurationManager]): Source of `renderer.browser_type`.
                If None, defaults will be used.

        Raises:
            RendererError: If an unsupported browser type is configured.
        """
        if config:
            self.browser_type = config.get('renderer.browser_type', self.DEFAULT_BROWSER_TYPE)
        else:
            self.browser_type = self.DEFAULT_BROWSER_TYPE

        if self.browser_type not in self.SUPPORTED_BROWSER_TYPES:
            logger.error(f"Unsupported browser type configured: {self.browser_type}")
            raise RendererError(f"Unsupported browser type: {self.browser_type}. Only 'chromium' is supported.")

        self.launch_options = launch_options or LaunchOptions(sandbox_disabled=False)
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        logger.debug(f"PlaywrightManager configured to use browser: {self.browser_type}")

    async def __aenter__(self) -> 'PlaywrightManager':
        """
        Starts the Playwright engine and launches the configured browser.

        Raises:
            RendererError: If Playwright fails to start or the browser fails to launch.
                           This can happen if browser binaries are not installed.
        """
        logger.debug(f"Starting Playwright and launching {self.browser_type} with args {self.launch_options.args}.")
        try:
            self.playwright = await async_playwright().start()
            browser_launcher = getattr(self.playwright, self.browser_type)
            self.browser = await browser_launcher.launch(**self.launch_options.to_playwright())
            logger.info(f"{self.browser_type} browser launched successfully.")
        except Exception as e:
            logger.error(f"Failed to initialize Playwright or launch browser {self.browser_type}: {e}", exc_info=True)
            if self.playwright:
                try:
                    await self.playwright.stop()
                except Exception as stop_e:
                    logger.error(f"Error stopping Playwright during __aenter__ cleanup: {stop_e}", exc_info=True)
                self.playwright = None
            raise RendererError(f"Failed to initialize Playwright or launch browser {self.browser_type}: {e}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """
        Closes the browser and stops the Playwright engine, whether or not the
        block raised. Exceptions from the block are not suppressed.
        """
        logger.debug("Exiting PlaywrightManager context: Closing browser and stopping Playwright.")
        if self.browser:
            try:
                await self.browser.close()
                logger.info("Browser closed successfully.")
            except Exception as e:
                logger.error(f"Error closing browser: {e}", exc_info=True)
        if self.playwright:
            try:
                await self.playwright.stop()
                logger.debug("Playwright stopped successfully.")
            except Exception as e:
                logger.error(f"Error stopping Playwright: {e}", exc_info=True)

        self.browser = None
        self.playwright = None

    async def new_page(self) -> Page:
        """
        Opens a new page (tab) in the launched browser.

        Raises:
            RendererError: If the browser is not initialized (e.g., not used within 'async with').
        """
        if not self.browser:
            logger.error("new_page called but browser is not initialized.")
            raise RendererError("Browser is not initialized. Ensure PlaywrightManager is used within an 'async with' statement.")
        return await self.browser.new_page()

    async def add_cookies(self, page: Page, cookies: List[Cookie]) -> None:
        """Adds cookies to the page's browser context; call before navigating so the first request carries them."""
        logger.debug(f"Setting {len(cookies)} cookie(s): {[c.name for c in cookies]}")
        await page.context.add_cookies([cookie.model_dump() for cookie in cookies])

    async def set_viewport(self, page: Page, viewport: Viewport) -> None:
        logger.debug(f"Setting viewport to {viewport.width}x{viewport.height}.")
        await page.set_viewport_size({"width": viewport.width, "height": viewport.height})

    async def navigate(self, page: Page, url: str, nav_options: NavigationOptions) -> None:
        """
        Navigates `page` to `url` and waits for the configured readiness condition.

        Args:
            page (Page): The page to navigate.
            url (str): Absolute URL (http(s):// or file://).
            nav_options (NavigationOptions): Timeout and wait condition.

        Raises:
            NavigationTimeoutError: If the wait condition is not met within the timeout.
            NavigationError: For any other navigation failure (DNS, refused connection,
                             unknown wait condition, ...).
        """
        logger.debug(f"Navigating to {url} (timeout {nav_options.timeout_ms}ms, wait_until '{nav_options.wait_until}').")
        try:
            await page.goto(url, **nav_options.to_playwright())
        except PlaywrightTimeoutError as e:
            logger.error(f"Navigation to '{url}' timed out after {nav_options.timeout_ms}ms.")
            raise NavigationTimeoutError(url, nav_options.timeout_ms, original_exception=e)
        except Exception as e:
            logger.error(f"Navigation to '{url}' failed: {e}", exc_info=True)
            raise NavigationError(url, str(e), original_exception=e)
        logger.info(f"Loaded {url}.")

    async def render_pdf(self, page: Page, pdf_options: PdfOptions) -> bytes:
        """
        Prints the current page to PDF.

        When `pdf_options.output_path` is set, Playwright also writes the file.

        Raises:
            RendererError: If PDF generation fails.
        """
        try:
            buffer = await page.pdf(**pdf_options.to_playwright())
        except Exception as e:
            logger.error(f"Failed to print PDF: {e}", exc_info=True)
            raise RendererError(f"Failed to print PDF: {e}")
        if pdf_options.output_path:
            logger.info(f"PDF saved successfully to: {pdf_options.output_path}")
        return buffer

    async def render_screenshot(self, page: Page, screenshot_options: ScreenshotOptions) -> bytes:
        """
        Captures the current page as PNG.

        When `screenshot_options.output_path` is set, Playwright also writes the file.

        Raises:
            RendererError: If the screenshot operation fails.
        """
        try:
            buffer = await page.screenshot(**screenshot_options.to_playwright())
        except Exception as e:
            logger.error(f"Failed to take screenshot: {e}", exc_info=True)
            raise RendererError(f"Failed to take screenshot: {e}")
        if screenshot_options.output_path:
            logger.info(f"Screenshot saved successfully to: {screenshot_options.output_path}")
        return buffer
