"""
Request-scoped data models for headless_render.

Every model is a frozen pydantic model: built once per command invocation
from CLI input (or from the batch manifest) and never mutated afterwards.
The `to_playwright()` helpers return keyword arguments for the matching
Playwright call.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Playwright has a single network-idle condition; the 0/2 connection variants
# of the original vocabulary both map onto it.
WAIT_UNTIL_ALIASES = {
    "networkidle0": "networkidle",
    "networkidle2": "networkidle",
}


class RenderMode(str, Enum):
    PDF = "pdf"
    SCREENSHOT = "screenshot"


class RenderRequest(BaseModel):
    """A single render job: what to load, where to put the result, and how to render it."""
    target: str
    output_path: Optional[str] = None
    mode: RenderMode

    model_config = ConfigDict(frozen=True)


class LaunchOptions(BaseModel):
    """
    Browser launch configuration.

    When the sandbox is disabled, `args` carries both `--no-sandbox` and
    `--disable-setuid-sandbox`; Chromium needs them together on restricted hosts.
    """
    sandbox_disabled: bool = True
    args: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def to_playwright(self) -> Dict[str, Any]:
        return {"args": list(self.args), "chromium_sandbox": not self.sandbox_disabled}


class NavigationOptions(BaseModel):
    """How long, and until which readiness condition, a navigation may take."""
    timeout_ms: int = Field(default=30000, ge=0)
    wait_until: str = "load"

    model_config = ConfigDict(frozen=True)

    def to_playwright(self) -> Dict[str, Any]:
        # Unknown conditions are passed through; Playwright rejects them at navigation.
        return {
            "timeout": self.timeout_ms,
            "wait_until": WAIT_UNTIL_ALIASES.get(self.wait_until, self.wait_until),
        }


class Margins(BaseModel):
    """Page margins as CSS length strings (e.g. '6.25mm')."""
    top: str
    right: str
    bottom: str
    left: str

    model_config = ConfigDict(frozen=True)


class PdfOptions(BaseModel):
    format: str = "Letter"
    landscape: bool = False
    print_background: bool = True
    margin: Margins
    display_header_footer: bool = False
    header_template: str = ""
    footer_template: str = ""
    output_path: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def to_playwright(self) -> Dict[str, Any]:
        return {
            "path": self.output_path,
            "format": self.format,
            "landscape": self.landscape,
            "print_background": self.print_background,
            "margin": self.margin.model_dump(),
            "display_header_footer": self.display_header_footer,
            "header_template": self.header_template,
            "footer_template": self.footer_template,
        }


class Viewport(BaseModel):
    width: int = Field(ge=0)
    height: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)


class ScreenshotOptions(BaseModel):
    full_page: bool = True
    omit_background: bool = False
    viewport: Optional[Viewport] = None
    output_path: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def to_playwright(self) -> Dict[str, Any]:
        return {
            "path": self.output_path,
            "full_page": self.full_page,
            "omit_background": self.omit_background,
            "type": "png",
        }


class Cookie(BaseModel):
    """A cookie scoped to the navigation target URL."""
    name: str
    value: str
    url: str

    model_config = ConfigDict(frozen=True)


# --- Batch manifest ---
# Field aliases follow the JSON keys of the manifest format.

class PdfObject(BaseModel):
    is_landscape: bool = Field(default=False, alias="isLandscape")
    footer_template: str = Field(default="", alias="footerTemplate")
    footer_height: Optional[str] = Field(default=None, alias="footerHeight")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="after")
    def check_footer_height(self) -> "PdfObject":
        if self.footer_template and not self.footer_height:
            raise ValueError("footerHeight is required when footerTemplate is set")
        return self


class BatchEntry(BaseModel):
    source_file: str = Field(alias="htmlFile")
    destination_file: str = Field(alias="tmpPDFFile")
    pdf_object: PdfObject = Field(alias="pdfObject")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class BatchManifest(BaseModel):
    """An ordered list of batch entries, loaded once and consumed in order."""
    data: List[BatchEntry]

    model_config = ConfigDict(frozen=True)


class BatchSettings(BaseModel):
    """PDF settings shared by every entry of a batch; entries override orientation and footer."""
    format: str = "A4"
    print_background: bool = True
    margin: Margins

    model_config = ConfigDict(frozen=True)
