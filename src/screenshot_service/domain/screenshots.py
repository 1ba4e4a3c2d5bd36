"""Models for screenshot requests and results."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Literal

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field

from screenshot_service.domain.errors import ScreenshotError

ImageFormat = Literal["jpeg", "png"]

MIN_DIMENSION = 100
MAX_DIMENSION = 2000
DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 720

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def _require_absolute_uri(value: str) -> str:
    """Accept only absolute URIs (scheme followed by a non-empty remainder)."""
    match = _SCHEME_PATTERN.match(value)
    if match is None or match.end() == len(value) or any(c.isspace() for c in value):
        raise ValueError("must be a valid absolute URI")
    return value


AbsoluteUri = Annotated[str, AfterValidator(_require_absolute_uri)]


class ScreenshotRequest(BaseModel):
    """Validated parameters for a single capture."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: AbsoluteUri
    format: ImageFormat = "jpeg"
    width: int = Field(default=DEFAULT_WIDTH, ge=MIN_DIMENSION, le=MAX_DIMENSION)
    height: int = Field(default=DEFAULT_HEIGHT, ge=MIN_DIMENSION, le=MAX_DIMENSION)
    full_page: bool = Field(
        default=False, validation_alias=AliasChoices("full_page", "fullPage")
    )
    referer: AbsoluteUri | None = None

    @property
    def effective_referer(self) -> str:
        """Referer header value sent with navigation."""
        return self.referer or self.url


@dataclass(frozen=True)
class CapturedImage:
    """Raw image bytes produced by a browser session."""

    image_bytes: bytes
    image_format: ImageFormat

    @property
    def content_type(self) -> str:
        return f"image/{self.image_format}"


@dataclass(frozen=True)
class ScreenshotResult:
    """Outcome of the pipeline, consumed once by the response encoder."""

    status_code: int
    content_type: str
    image_bytes: bytes | None = None
    error_body: dict[str, object] | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.image_bytes is not None

    @classmethod
    def success(
        cls,
        image: CapturedImage,
        cache_control: str,
        headers: Mapping[str, str] | None = None,
    ) -> "ScreenshotResult":
        """Build a 200 result carrying image bytes."""
        return cls(
            status_code=200,
            content_type=image.content_type,
            image_bytes=image.image_bytes,
            headers={**(headers or {}), "Cache-Control": cache_control},
        )

    @classmethod
    def failure(
        cls, error: ScreenshotError, headers: Mapping[str, str] | None = None
    ) -> "ScreenshotResult":
        """Build an error result from a pipeline failure."""
        return cls(
            status_code=error.status_code,
            content_type="application/json",
            error_body=error.to_body(),
            headers=dict(headers or {}),
        )
