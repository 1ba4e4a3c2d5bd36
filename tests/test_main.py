"""Tests for the uvicorn entrypoint."""

from fastapi import FastAPI

from screenshot_service import __main__ as entrypoint


def test_main_serves_configured_app(monkeypatch) -> None:
    calls: list[dict[str, object]] = []

    def fake_run(app: object, **kwargs: object) -> None:
        calls.append({"app": app, **kwargs})

    monkeypatch.setenv("PORT", "9123")
    monkeypatch.setattr(entrypoint.uvicorn, "run", fake_run)

    entrypoint.main()

    assert len(calls) == 1
    assert isinstance(calls[0]["app"], FastAPI)
    assert calls[0]["port"] == 9123
    assert calls[0]["log_level"] == "info"
