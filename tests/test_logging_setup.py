from __future__ import annotations

import logging
from datetime import UTC, datetime

import structlog

from arc3_resolver.util.httpx_setup import silence_httpx_logs
from arc3_resolver.util.logging_setup import configure_logging, resolve_log_path


def test_resolve_log_path_inserts_timestamp() -> None:
    fixed = datetime(2026, 2, 3, 1, 2, 3, tzinfo=UTC)
    resolved = resolve_log_path("logs/arc3.log", now=fixed)
    assert resolved == "logs/arc3-20260203-010203.log"


def test_resolve_log_path_template_supports_ts() -> None:
    fixed = datetime(2026, 2, 3, 1, 2, 3, tzinfo=UTC)
    resolved = resolve_log_path("logs/arc3-{ts}.log", now=fixed)
    assert resolved == "logs/arc3-20260203-010203.log"


def test_resolve_log_path_none_returns_none() -> None:
    fixed = datetime(2026, 2, 3, 1, 2, 3, tzinfo=UTC)
    assert resolve_log_path(None, now=fixed) is None


def test_configure_logging_writes_json_to_file(tmp_path) -> None:
    log_path = str(tmp_path / "out-{ts}.log")
    configure_logging("debug", style="json", console=False, file_path=log_path)
    try:
        structlog.get_logger("test").info("nft_resolved", asset_id=5)
        for handler in logging.getLogger().handlers:
            handler.flush()
        files = list(tmp_path.glob("out-*.log"))
        assert len(files) == 1
        content = files[0].read_text(encoding="utf-8")
        assert '"event": "nft_resolved"' in content
        assert '"asset_id": 5' in content
    finally:
        structlog.reset_defaults()
        logging.basicConfig(handlers=[logging.NullHandler()], force=True)


def test_silence_httpx_logs() -> None:
    silence_httpx_logs()
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING
