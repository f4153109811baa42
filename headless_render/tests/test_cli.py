import logging

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from headless_render.cli import COMMANDS, apply_defaults, build_parser, dispatch
from headless_render.core.config import ConfigurationManager
from headless_render.core.exceptions import NavigationTimeoutError
from headless_render.core.models import RenderMode


@pytest.fixture(autouse=True)
def no_logging_reconfiguration():
    # dispatch() reconfigures the root logger; keep pytest's capture handlers in place.
    with patch('headless_render.cli.setup_logging', MagicMock()) as mock_setup:
        yield mock_setup


@pytest.fixture
def config():
    """The real packaged defaults, restored afterwards in case a test loads another file."""
    manager = ConfigurationManager()
    saved_config, saved_path = manager._config, manager._current_path
    manager.load_config()
    yield manager
    manager._config, manager._current_path = saved_config, saved_path


@pytest.fixture
def render_manager():
    instance = MagicMock()
    instance.render_pdf = AsyncMock(return_value=b"%PDF")
    instance.render_screenshot = AsyncMock(return_value=b"\x89PNG")
    with patch('headless_render.cli.RenderManager', return_value=instance):
        yield instance


@pytest.fixture
def batch_controller():
    instance = MagicMock()
    instance.run_batch = AsyncMock(return_value=["a.pdf"])
    with patch('headless_render.cli.BatchController', return_value=instance) as PatchedBC:
        yield PatchedBC, instance


def test_missing_command_is_a_usage_error(config):
    with pytest.raises(SystemExit) as excinfo:
        dispatch([], config=config)
    assert excinfo.value.code == 2


def test_unknown_command_is_a_usage_error(config):
    with pytest.raises(SystemExit) as excinfo:
        dispatch(["render", "x"], config=config)
    assert excinfo.value.code == 2


def test_help_lists_every_command(capsys):
    with pytest.raises(SystemExit) as excinfo:
        build_parser(COMMANDS).parse_args(["--help"])
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    for name in ("print", "screenshot", "bulk-print"):
        assert name in out


def test_print_defaults(config, render_manager):
    assert dispatch(["print", "https://example.com", "out.pdf"], config=config) == 0

    request, pdf_options, nav, launch = render_manager.render_pdf.await_args.args[:4]
    cookie = render_manager.render_pdf.await_args.args[4]
    assert request.target == "https://example.com"
    assert request.output_path == "out.pdf"
    assert request.mode == RenderMode.PDF
    assert pdf_options.format == "Letter"
    assert pdf_options.print_background is True
    assert pdf_options.landscape is False
    assert pdf_options.display_header_footer is False
    assert pdf_options.margin.model_dump() == {
        "top": "6.25mm", "right": "6.25mm", "bottom": "14.11mm", "left": "6.25mm",
    }
    assert nav.timeout_ms == 30000
    assert nav.wait_until == "load"
    assert "--no-sandbox" in launch.args and "--disable-setuid-sandbox" in launch.args
    assert cookie is None


def test_print_flags_override_defaults(config, render_manager):
    argv = [
        "print", "page.html",
        "--sandbox", "--timeout", "5000", "--wait-until", "networkidle0",
        "--cookie", "a:1", "--cookie", "b:2",
        "--no-background", "--format", "A4", "--landscape",
        "--margin-top", "1cm", "--footer-template", "<div>f</div>", "--footer-height", "2cm",
    ]
    assert dispatch(argv, config=config) == 0

    request, pdf_options, nav, launch, cookie = render_manager.render_pdf.await_args.args
    assert request.output_path is None
    assert pdf_options.format == "A4"
    assert pdf_options.landscape is True
    assert pdf_options.print_background is False
    assert pdf_options.margin.top == "1cm"
    assert pdf_options.margin.bottom == "2cm"
    assert pdf_options.display_header_footer is True
    assert nav.timeout_ms == 5000
    assert nav.to_playwright()["wait_until"] == "networkidle"
    assert launch.args == []
    assert cookie == ["a:1", "b:2"]


def test_screenshot_defaults_and_viewport(config, render_manager):
    assert dispatch(["screenshot", "https://example.com", "shot.png", "--viewport", "800x600"], config=config) == 0

    request, options = render_manager.render_screenshot.await_args.args[:2]
    assert request.mode == RenderMode.SCREENSHOT
    assert request.output_path == "shot.png"
    assert options.full_page is True
    assert options.omit_background is False
    assert (options.viewport.width, options.viewport.height) == (800, 600)


@pytest.mark.parametrize("viewport", ["abcx600", "800"])
def test_malformed_viewport_exits_1_without_rendering(config, render_manager, caplog, viewport):
    with caplog.at_level(logging.ERROR):
        assert dispatch(["screenshot", "https://example.com", "--viewport", viewport], config=config) == 1
    render_manager.render_screenshot.assert_not_called()
    assert "Failed to take screenshot" in caplog.text


def test_handler_error_is_logged_with_prefix_and_exits_1(config, render_manager, caplog):
    render_manager.render_pdf.side_effect = NavigationTimeoutError("https://example.com", 30000)
    with caplog.at_level(logging.ERROR):
        assert dispatch(["print", "https://example.com"], config=config) == 1
    assert "Failed to generate pdf" in caplog.text
    assert "timed out after 30000ms" in caplog.text


def test_bulk_print_defaults(config, batch_controller):
    PatchedBC, instance = batch_controller
    assert dispatch(["bulk-print", "batch.json"], config=config) == 0

    PatchedBC.assert_called_once_with(config=config, settle_delay_ms=None)
    manifest_path, settings, nav, launch = instance.run_batch.await_args.args
    assert manifest_path == "batch.json"
    assert settings.format == "A4"
    assert settings.print_background is True
    assert settings.margin.bottom == "14.11mm"
    assert nav.timeout_ms == 30000


def test_bulk_print_manifest_error_exits_1(config, tmp_path, caplog):
    with patch('headless_render.core.batch.PlaywrightManager') as PatchedPM, caplog.at_level(logging.ERROR):
        assert dispatch(["bulk-print", str(tmp_path / "missing.json")], config=config) == 1
    PatchedPM.assert_not_called()
    assert "Failed to generate pdf" in caplog.text


def test_alternate_config_file_supplies_defaults(config, render_manager, tmp_path):
    alt = tmp_path / "alt.yaml"
    alt.write_text("commands:\n  common:\n    timeout: 1234\n  print:\n    format: Legal\n", encoding="utf-8")

    assert dispatch(["--config", str(alt), "print", "https://example.com"], config=config) == 0

    _, pdf_options, nav, _ = render_manager.render_pdf.await_args.args[:4]
    assert pdf_options.format == "Legal"
    assert nav.timeout_ms == 1234
    # Keys absent from the file fall back to the flag defaults.
    assert pdf_options.margin.bottom == "14.11mm"
    assert nav.wait_until == "load"


def test_missing_config_file_exits_1(config, render_manager, tmp_path):
    assert dispatch(["--config", str(tmp_path / "nope.yaml"), "print", "https://example.com"], config=config) == 1
    render_manager.render_pdf.assert_not_called()


def test_apply_defaults_keeps_explicit_values(config):
    spec = COMMANDS["print"]
    args = build_parser(COMMANDS).parse_args(["print", "x", "--no-background", "--timeout", "0"])
    apply_defaults(args, spec, config)
    assert args.background is False
    assert args.timeout == 0
    assert args.format == "Letter"
    assert args.sandbox is False
