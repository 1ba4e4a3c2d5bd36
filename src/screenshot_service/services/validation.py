"""Parameter validation for screenshot requests."""

from collections.abc import Mapping

from pydantic import ValidationError

from screenshot_service.domain.errors import FieldViolation, ParameterValidationError
from screenshot_service.domain.screenshots import ScreenshotRequest


def parse_screenshot_request(params: object) -> ScreenshotRequest:
    """Validate a raw parameter bag and apply defaults.

    ``params`` is either the query string mapping or the decoded JSON body.
    Every violated rule is reported, not only the first one.
    """
    if not isinstance(params, Mapping):
        raise ParameterValidationError(
            [FieldViolation(field="body", message="request body must be a JSON object")]
        )
    try:
        return ScreenshotRequest.model_validate(dict(params))
    except ValidationError as exc:
        raise ParameterValidationError(_to_violations(exc)) from exc


def _to_violations(exc: ValidationError) -> list[FieldViolation]:
    violations: list[FieldViolation] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "body"
        violations.append(FieldViolation(field=field, message=_message(field, error)))
    return violations


def _message(field: str, error: Mapping[str, object]) -> str:
    """Turn a pydantic error entry into a client-facing message."""
    if error["type"] == "missing":
        return f"{field} is required"
    if error["type"] == "value_error":
        ctx = error.get("ctx")
        if isinstance(ctx, Mapping) and "error" in ctx:
            return str(ctx["error"])
    return str(error["msg"])
