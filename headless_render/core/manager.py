"""
Single-document rendering for headless_render.

`RenderManager` runs the `print` and `screenshot` commands: it resolves the
target to a URL, launches a fresh browser, injects cookies, navigates, renders,
and either leaves the file written by the engine or streams the bytes to
standard output. The browser is closed on every exit path.
"""
from typing import List, Optional, Sequence, TYPE_CHECKING, Union

from headless_render.components.renderer.playwright_manager import PlaywrightManager
from headless_render.components.storage.file_storage import FileStorage
from headless_render.core.logger import get_logger
from headless_render.core.models import (
    Cookie,
    LaunchOptions,
    NavigationOptions,
    PdfOptions,
    RenderRequest,
    ScreenshotOptions,
)
from headless_render.core.options import build_cookies, resolve_target

if TYPE_CHECKING:
    from headless_render.core.config import ConfigurationManager

logger = get_logger(__name__)

CookieInput = Optional[Union[str, Sequence[str]]]


class RenderManager:
    """
    Orchestrates one render job per call, each with its own browser instance.
    """
    def __init__(self, config: Optional['ConfigurationManager'] = None, file_storage: Optional[FileStorage] = None):
        """
        Args:
            config (Optional[ConfigurationManager]): Passed to `PlaywrightManager` for
                the browser type. If None, defaults are used.
            file_storage (Optional[FileStorage]): Output sink for stdout streaming.
        """
        self.config = config
        self.file_storage = file_storage or FileStorage()

    def _cookies_for(self, url: str, cookie: CookieInput) -> List[Cookie]:
        # Built before launch so a malformed cookie never starts a browser.
        if not cookie:
            return []
        return build_cookies(url, cookie)

    def _emit(self, request: RenderRequest, buffer: bytes) -> None:
        if request.output_path:
            return
        self.file_storage.write_stdout(buffer)

    async def render_pdf(
        self,
        request: RenderRequest,
        pdf_options: PdfOptions,
        nav_options: NavigationOptions,
        launch_options: LaunchOptions,
        cookie: CookieInput = None,
    ) -> bytes:
        """
        Prints `request.target` to PDF.

        Args:
            request (RenderRequest): Target and optional output path.
            pdf_options (PdfOptions): Paper, margins, header/footer. Its output path is
                replaced by `request.output_path`.
            nav_options (NavigationOptions): Timeout and wait condition.
            launch_options (LaunchOptions): Sandbox flags.
            cookie: One `key:value` string or several, scoped to the target URL.

        Returns:
            bytes: The PDF bytes (also written to `request.output_path` or stdout).

        Raises:
            MalformedCookieError: If a cookie string has no ':'.
            NavigationTimeoutError: If navigation exceeds `nav_options.timeout_ms`.
            NavigationError: For other navigation failures.
            RendererError: If launching the browser or printing fails.
        """
        url = resolve_target(request.target)
        cookies = self._cookies_for(url, cookie)
        options = pdf_options.model_copy(update={"output_path": request.output_path})
        logger.info(f"Printing {url} to {request.output_path or 'stdout'}.")

        async with PlaywrightManager(launch_options, config=self.config) as browser:
            page = await browser.new_page()
            if cookies:
                await browser.add_cookies(page, cookies)
            await browser.navigate(page, url, nav_options)
            buffer = await browser.render_pdf(page, options)
            self._emit(request, buffer)
        return buffer

    async def render_screenshot(
        self,
        request: RenderRequest,
        screenshot_options: ScreenshotOptions,
        nav_options: NavigationOptions,
        launch_options: LaunchOptions,
        cookie: CookieInput = None,
    ) -> bytes:
        """
        Captures `request.target` as a PNG.

        The viewport, if any, is applied before cookies and navigation.
        Arguments, return value and errors mirror `render_pdf`.
        """
        url = resolve_target(request.target)
        cookies = self._cookies_for(url, cookie)
        options = screenshot_options.model_copy(update={"output_path": request.output_path})
        logger.info(f"Taking screenshot of {url} to {request.output_path or 'stdout'}.")

        async with PlaywrightManager(launch_options, config=self.config) as browser:
            page = await browser.new_page()
            if options.viewport:
                await browser.set_viewport(page, options.viewport)
            if cookies:
                await browser.add_cookies(page, cookies)
            await browser.navigate(page, url, nav_options)
            buffer = await browser.render_screenshot(page, options)
            self._emit(request, buffer)
        return buffer
