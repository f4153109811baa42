import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from headless_render.core.exceptions import InvalidViewportError, MalformedCookieError
from headless_render.core.models import NavigationOptions, PdfObject, ScreenshotOptions, Viewport
from headless_render.core.options import (
    build_cookies,
    build_launch_options,
    build_navigation_options,
    build_pdf_options,
    parse_viewport,
    resolve_target,
    to_file_url,
    unescape_template,
)

MARGINS = dict(margin_top="6.25mm", margin_right="6.25mm", margin_bottom="14.11mm", margin_left="6.25mm")


def test_launch_options_sandbox_disabled_adds_both_flags():
    options = build_launch_options(sandbox=False)
    assert "--no-sandbox" in options.args
    assert "--disable-setuid-sandbox" in options.args
    assert options.sandbox_disabled is True
    assert options.to_playwright() == {
        "args": ["--no-sandbox", "--disable-setuid-sandbox"],
        "chromium_sandbox": False,
    }


def test_launch_options_sandbox_enabled_adds_no_flags():
    options = build_launch_options(sandbox=True)
    assert "--no-sandbox" not in options.args
    assert "--disable-setuid-sandbox" not in options.args
    assert options.to_playwright()["chromium_sandbox"] is True


def test_navigation_options_passthrough():
    options = build_navigation_options(5000, "domcontentloaded")
    assert options.timeout_ms == 5000
    assert options.wait_until == "domcontentloaded"
    assert options.to_playwright() == {"timeout": 5000, "wait_until": "domcontentloaded"}


@pytest.mark.parametrize("condition", ["networkidle0", "networkidle2"])
def test_navigation_options_map_network_idle_variants(condition):
    assert build_navigation_options(100, condition).to_playwright()["wait_until"] == "networkidle"


def test_navigation_options_unknown_condition_is_not_validated():
    # The engine rejects it at navigation time.
    assert NavigationOptions(timeout_ms=0, wait_until="whenever").to_playwright()["wait_until"] == "whenever"


def test_build_cookies_splits_at_first_colon():
    cookies = build_cookies("https://example.com", "a:b:c")
    assert len(cookies) == 1
    assert cookies[0].name == "a"
    assert cookies[0].value == "b:c"
    assert cookies[0].url == "https://example.com"


def test_build_cookies_accepts_repeated_values():
    cookies = build_cookies("https://example.com/page", ["session:abc", "theme:dark"])
    assert [(c.name, c.value) for c in cookies] == [("session", "abc"), ("theme", "dark")]
    assert all(c.url == "https://example.com/page" for c in cookies)


def test_build_cookies_empty_value_is_allowed():
    cookie = build_cookies("https://example.com", "flag:")[0]
    assert cookie.name == "flag"
    assert cookie.value == ""


def test_build_cookies_without_delimiter_fails():
    with pytest.raises(MalformedCookieError) as excinfo:
        build_cookies("https://example.com", "novalue")
    assert "cookie must contain : delimiter" in str(excinfo.value)
    assert excinfo.value.cookie == "novalue"


def test_parse_viewport_valid():
    viewport = parse_viewport("800x600")
    assert (viewport.width, viewport.height) == (800, 600)
    upper = parse_viewport("1280X720")
    assert (upper.width, upper.height) == (1280, 720)


@pytest.mark.parametrize("spec", ["abcx600", "800", "800x", "x600", "800x600x1", " 800x600", "-800x600"])
def test_parse_viewport_invalid(spec):
    with pytest.raises(InvalidViewportError):
        parse_viewport(spec)


@pytest.mark.parametrize("url", [
    "https://example.com",
    "http://localhost:8080/report?id=1",
    "file:///tmp/report.html",
])
def test_resolve_target_passes_urls_through(url):
    assert resolve_target(url) == url


def test_resolve_target_converts_relative_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    resolved = resolve_target("report.html")
    assert resolved.startswith("file://")
    assert resolved == Path(os.path.join(str(tmp_path), "report.html")).as_uri()


def test_resolve_target_converts_absolute_path(tmp_path):
    path = str(tmp_path / "my report.html")
    resolved = resolve_target(path)
    assert resolved == to_file_url(path)
    assert "my%20report.html" in resolved


def test_unescape_template_replaces_escaped_quotes():
    raw = '<div class=\\"footer\\"><span class=\\"pageNumber\\"></span></div>'
    assert unescape_template(raw) == '<div class="footer"><span class="pageNumber"></span></div>'
    assert unescape_template("plain") == "plain"


def test_pdf_options_empty_footer_keeps_bottom_margin():
    options = build_pdf_options("A4", False, True, footer_template="", footer_height="20mm", **MARGINS)
    assert options.display_header_footer is False
    assert options.margin.bottom == "14.11mm"


def test_pdf_options_footer_forces_display_and_overrides_bottom_margin():
    options = build_pdf_options("A4", True, True, footer_template="<div>1</div>", footer_height="20mm", **MARGINS)
    assert options.display_header_footer is True
    assert options.margin.bottom == "20mm"
    assert options.margin.top == "6.25mm"
    assert options.landscape is True


def test_pdf_options_footer_without_height_keeps_bottom_margin():
    options = build_pdf_options("Letter", False, True, footer_template="<div>1</div>", **MARGINS)
    assert options.display_header_footer is True
    assert options.margin.bottom == "14.11mm"


def test_pdf_options_header_only_respects_flag():
    options = build_pdf_options("Letter", False, False, display_header_footer=True,
                                header_template="<div>h</div>", **MARGINS)
    kwargs = options.to_playwright()
    assert kwargs["display_header_footer"] is True
    assert kwargs["header_template"] == "<div>h</div>"
    assert kwargs["print_background"] is False
    assert kwargs["path"] is None
    assert kwargs["margin"] == {"top": "6.25mm", "right": "6.25mm", "bottom": "14.11mm", "left": "6.25mm"}


@pytest.mark.parametrize("output_path", ["shot", "shot.jpg", "out.PNG.tmp", None])
def test_screenshot_options_request_png_regardless_of_extension(output_path):
    kwargs = ScreenshotOptions(output_path=output_path).to_playwright()
    assert kwargs == {"path": output_path, "full_page": True, "omit_background": False, "type": "png"}


def test_models_are_frozen():
    viewport = Viewport(width=800, height=600)
    with pytest.raises(ValidationError):
        viewport.width = 1024


def test_pdf_object_accepts_field_names_and_aliases():
    by_alias = PdfObject.model_validate({"isLandscape": True, "footerTemplate": "<b>f</b>", "footerHeight": "20mm"})
    by_name = PdfObject(is_landscape=True, footer_template="<b>f</b>", footer_height="20mm")
    assert by_alias == by_name
