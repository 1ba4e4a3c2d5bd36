"""Error taxonomy for the screenshot pipeline."""

from dataclasses import dataclass

_MAX_MESSAGE_LENGTH = 300


class ScreenshotError(Exception):
    """Base class for failures converted into structured responses."""

    status_code = 500
    label = "internal server error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, object]:
        """Return the JSON error body for this failure."""
        return {"error": self.label, "message": redact_message(self.message)}


@dataclass(frozen=True)
class FieldViolation:
    """A single rule a parameter failed to satisfy."""

    field: str
    message: str


class ParameterValidationError(ScreenshotError):
    """Malformed or out-of-range request parameters."""

    status_code = 400
    label = "invalid parameters"

    def __init__(self, violations: list[FieldViolation]) -> None:
        super().__init__("; ".join(f"{v.field}: {v.message}" for v in violations))
        self.violations = violations

    def to_body(self) -> dict[str, object]:
        return {
            "error": self.label,
            "details": [
                {"field": violation.field, "message": violation.message}
                for violation in self.violations
            ],
        }


class RateLimitExceededError(ScreenshotError):
    """Client exceeded its request quota for the current window."""

    status_code = 429
    label = "rate limited"

    def __init__(self, retry_after_seconds: int) -> None:
        super().__init__("Too many requests, please try again later.")
        self.retry_after_seconds = retry_after_seconds

    def to_body(self) -> dict[str, object]:
        return {"error": self.label, "message": self.message}


class BrowserLaunchError(ScreenshotError):
    """The browser process or its page could not be started."""

    label = "browser launch failed"


class NavigationError(ScreenshotError):
    """Loading the target page failed or timed out."""

    label = "navigation failed"


class CaptureError(ScreenshotError):
    """The browser failed while rasterizing the page."""

    label = "capture failed"


class RequestTimeoutError(ScreenshotError):
    """The whole request exceeded its time ceiling."""

    label = "request timed out"


def redact_message(message: str) -> str:
    """Keep the first line of an error message, truncated for responses."""
    first_line = message.strip().splitlines()[0] if message.strip() else ""
    if len(first_line) > _MAX_MESSAGE_LENGTH:
        return first_line[: _MAX_MESSAGE_LENGTH - 3] + "..."
    return first_line
