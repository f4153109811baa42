"""
Translation of parsed command-line values into browser-engine configuration.

Everything here is a pure function: no browser, no I/O. The render driver and
the batch controller call these to build launch, navigation, cookie, viewport
and PDF settings before touching Playwright.
"""
import os
import re
from pathlib import Path
from typing import List, Optional, Sequence, Union
from urllib.parse import urlparse

from headless_render.core.exceptions import InvalidViewportError, MalformedCookieError
from headless_render.core.models import (
    Cookie,
    LaunchOptions,
    Margins,
    NavigationOptions,
    PdfOptions,
    Viewport,
)

SANDBOX_DISABLE_ARGS = ("--no-sandbox", "--disable-setuid-sandbox")

VIEWPORT_PATTERN = re.compile(r"^(?P<width>\d+)[xX](?P<height>\d+)$")

COOKIE_DELIMITER = ":"

ESCAPED_QUOTE = '\\"'


def build_launch_options(sandbox: bool) -> LaunchOptions:
    """Chromium sandboxing flags: both hardening switches when the sandbox is off, none otherwise."""
    if sandbox:
        return LaunchOptions(sandbox_disabled=False, args=[])
    return LaunchOptions(sandbox_disabled=True, args=list(SANDBOX_DISABLE_ARGS))


def build_navigation_options(timeout_ms: int, wait_until: str) -> NavigationOptions:
    return NavigationOptions(timeout_ms=timeout_ms, wait_until=wait_until)


def build_cookies(target_url: str, cookie: Union[str, Sequence[str]]) -> List[Cookie]:
    """
    Splits `key:value` cookie strings at the first ':'.

    Args:
        target_url (str): The navigation target; every cookie is scoped to it.
        cookie (Union[str, Sequence[str]]): One cookie string, or several when
            `--cookie` was repeated.

    Returns:
        List[Cookie]: One cookie per input string, in input order.

    Raises:
        MalformedCookieError: If a cookie string contains no ':'.
    """
    cookie_strings = [cookie] if isinstance(cookie, str) else list(cookie)
    cookies = []
    for cookie_string in cookie_strings:
        name, delimiter, value = cookie_string.partition(COOKIE_DELIMITER)
        if not delimiter:
            raise MalformedCookieError(cookie_string)
        cookies.append(Cookie(name=name, value=value, url=target_url))
    return cookies


def parse_viewport(spec: str) -> Viewport:
    """
    Parses a `WIDTHxHEIGHT` viewport spec (decimal integers, 'x' in either case).

    Raises:
        InvalidViewportError: If `spec` does not match the pattern.
    """
    match = VIEWPORT_PATTERN.match(spec)
    if not match:
        raise InvalidViewportError(spec)
    return Viewport(width=int(match.group("width")), height=int(match.group("height")))


def is_url(target: str) -> bool:
    parsed = urlparse(target)
    if parsed.scheme == "file":
        return True
    return bool(parsed.scheme) and bool(parsed.netloc)


def resolve_target(target: str) -> str:
    """
    Returns `target` unchanged when it is an absolute URL, otherwise the
    `file://` URL of the local path it names (relative paths resolve against
    the working directory).
    """
    if is_url(target):
        return target
    return to_file_url(target)


def to_file_url(path: str) -> str:
    return Path(os.path.abspath(path)).as_uri()


def unescape_template(template: str) -> str:
    """Turns literal `\\"` sequences (over-escaped manifest text) back into plain quotes."""
    return template.replace(ESCAPED_QUOTE, '"')


def build_pdf_options(
    format: str,
    landscape: bool,
    print_background: bool,
    margin_top: str,
    margin_right: str,
    margin_bottom: str,
    margin_left: str,
    display_header_footer: bool = False,
    header_template: str = "",
    footer_template: str = "",
    footer_height: Optional[str] = None,
    output_path: Optional[str] = None,
) -> PdfOptions:
    """
    Builds the options handed to `Page.pdf`.

    Footer visibility and bottom margin are coupled: a non-empty footer template
    always turns on `display_header_footer`, and when a `footer_height` is given
    it replaces the bottom margin so the footer has room to render.
    """
    show_footer = bool(footer_template)
    bottom = footer_height if show_footer and footer_height else margin_bottom
    return PdfOptions(
        format=format,
        landscape=landscape,
        print_background=print_background,
        margin=Margins(top=margin_top, right=margin_right, bottom=bottom, left=margin_left),
        display_header_footer=display_header_footer or show_footer,
        header_template=header_template,
        footer_template=footer_template,
        output_path=output_path,
    )
