"""
Batch PDF printing for headless_render.

`BatchController` runs the `bulk-print` command: it validates the whole
manifest up front, then prints every entry in manifest order through a single
browser page, pausing briefly after each PDF so the next navigation does not
pick up a stale render.
"""
import asyncio
from typing import List, Optional, TYPE_CHECKING

from headless_render.components.renderer.playwright_manager import PlaywrightManager
from headless_render.components.storage.file_storage import FileStorage
from headless_render.core.logger import get_logger
from headless_render.core.models import BatchEntry, BatchSettings, LaunchOptions, NavigationOptions, PdfOptions
from headless_render.core.options import build_pdf_options, to_file_url, unescape_template

if TYPE_CHECKING:
    from headless_render.core.config import ConfigurationManager

logger = get_logger(__name__)


class BatchController:
    """
    Prints every entry of a batch manifest with one shared browser.

    Attributes:
        settle_delay_ms (int): Pause after each written PDF, in milliseconds.
    """
    DEFAULT_SETTLE_DELAY_MS = 20

    def __init__(self, config: Optional['ConfigurationManager'] = None,
                 file_storage: Optional[FileStorage] = None,
                 settle_delay_ms: Optional[int] = None):
        self.config = config
        self.file_storage = file_storage or FileStorage()
        if settle_delay_ms is not None:
            self.settle_delay_ms = settle_delay_ms
        elif config:
            self.settle_delay_ms = int(config.get('batch.settle_delay_ms', self.DEFAULT_SETTLE_DELAY_MS))
        else:
            self.settle_delay_ms = self.DEFAULT_SETTLE_DELAY_MS

    def entry_pdf_options(self, entry: BatchEntry, settings: BatchSettings) -> PdfOptions:
        """
        PDF options for one entry: the shared paper size and margins, the entry's
        orientation, and its footer (which also claims the bottom margin).
        """
        pdf_object = entry.pdf_object
        return build_pdf_options(
            format=settings.format,
            landscape=pdf_object.is_landscape,
            print_background=settings.print_background,
            margin_top=settings.margin.top,
            margin_right=settings.margin.right,
            margin_bottom=settings.margin.bottom,
            margin_left=settings.margin.left,
            footer_template=unescape_template(pdf_object.footer_template),
            footer_height=pdf_object.footer_height,
            output_path=entry.destination_file,
        )

    async def run_batch(
        self,
        manifest_path: str,
        settings: BatchSettings,
        nav_options: NavigationOptions,
        launch_options: LaunchOptions,
    ) -> List[str]:
        """
        Prints every manifest entry to its destination file, in order.

        The first failing entry aborts the batch; PDFs already written stay on disk.

        Args:
            manifest_path (str): Path of the JSON manifest.
            settings (BatchSettings): Paper size, background and margins shared by all entries.
            nav_options (NavigationOptions): Timeout and wait condition for every navigation.
            launch_options (LaunchOptions): Sandbox flags for the shared browser.

        Returns:
            List[str]: Destination paths written, in manifest order.

        Raises:
            ManifestParseError: If the manifest is missing, not JSON, or structurally invalid.
                                Raised before the browser is launched.
            NavigationError: If an entry fails to load.
            RendererError: If the browser fails to launch or an entry fails to print.
        """
        manifest = self.file_storage.load_manifest(manifest_path)
        written: List[str] = []

        async with PlaywrightManager(launch_options, config=self.config) as browser:
            page = await browser.new_page()
            for index, entry in enumerate(manifest.data, start=1):
                url = to_file_url(entry.source_file)
                logger.info(f"[{index}/{len(manifest.data)}] Printing {url} to {entry.destination_file}.")
                await browser.navigate(page, url, nav_options)
                await browser.render_pdf(page, self.entry_pdf_options(entry, settings))
                written.append(entry.destination_file)
                await asyncio.sleep(self.settle_delay_ms / 1000)

        logger.info(f"Batch '{manifest_path}' finished: {len(written)} PDF(s) written.")
        return written
