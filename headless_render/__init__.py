"""
headless_render: render HTML files or URLs to PDF or PNG with a headless browser.

Commands (see `headless_render.cli`):
- print: one document to PDF.
- screenshot: one page to PNG.
- bulk-print: every entry of a JSON manifest to PDF, sharing one browser.
"""

__version__ = "0.1.0"
