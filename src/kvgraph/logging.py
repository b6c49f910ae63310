"""Logging setup for kvgraph.

Entry points (CLI, server) call configure_logging() once at startup.

Levels:
- DEBUG: store round-trips, snapshot sizes
- INFO: graph mutations, server lifecycle
- WARNING: masked load failures on read paths
- ERROR: failed loads before a write, failed saves, backend request errors

Events use a short snake_case message plus structured context in ``extra``
(``logger.warning("graph_load_failed", extra={"store.key": ...})``).

The only secret kvgraph handles is the KV REST token. It is redacted from
every handler's output: by value once configure_redaction() knows it, and by
shape (``KV_REST_API_TOKEN=...``, ``Authorization: Bearer ...``) otherwise.
"""

import contextlib
import json
import logging
import os
import re
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO

DEFAULT_LOG_RETENTION_DAYS = 7

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Shapes a KV REST token shows up in; group 1 is the secret
TOKEN_PATTERNS: tuple[str, ...] = (
    r"\b[A-Z0-9_]*(?:TOKEN|SECRET|PASSWORD)\s*[=:]\s*[\"']?([^\s\"',}]{8,})",
    r"\bBearer\s+([A-Za-z0-9._~+/=-]{8,})",
    r"[?&]token=([^&\s\"']{8,})",
)

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "filelock")

# Attributes every LogRecord carries; anything else came from ``extra=``
_RESERVED_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "component"}


def _mask(secret: str) -> str:
    if len(secret) < 12:
        return "***"
    return f"{secret[:4]}...{secret[-4:]}"


class SecretRedactor:
    """Masks KV credentials in log text, keeping both ends for identification."""

    def __init__(self, secrets: list[str] | None = None, enabled: bool = True):
        self.enabled = enabled
        self._patterns = [re.compile(p, re.IGNORECASE) for p in TOKEN_PATTERNS]
        self._secrets = sorted({s for s in secrets or [] if s}, key=len, reverse=True)

    def redact(self, text: str) -> str:
        if not self.enabled or not text:
            return text
        for secret in self._secrets:
            text = text.replace(secret, _mask(secret))
        for pattern in self._patterns:
            text = pattern.sub(self._mask_group, text)
        return text

    @staticmethod
    def _mask_group(match: re.Match[str]) -> str:
        secret = match.group(1)
        if "..." in secret:
            return match.group(0)
        start, end = match.span(1)
        whole_start = match.start(0)
        prefix = match.group(0)[: start - whole_start]
        suffix = match.group(0)[end - whole_start :]
        return f"{prefix}{_mask(secret)}{suffix}"


_redactor = SecretRedactor()


def configure_redaction(enabled: bool = True, secrets: list[str] | None = None) -> None:
    """Replace the process-wide redactor.

    Args:
        enabled: Turn redaction on or off.
        secrets: Literal values to mask wherever they appear (the configured
            KV REST token).
    """
    global _redactor
    _redactor = SecretRedactor(secrets=secrets, enabled=enabled)


class RedactingFilter(logging.Filter):
    """Applies the current redactor to the formatted message of each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _redactor.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def prune_old_logs(
    logs_dir: Path,
    retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    suffix: str = ".jsonl",
) -> int:
    """Delete ``*{suffix}`` files older than ``retention_days``.

    Returns:
        Number of files deleted.
    """
    if not logs_dir.is_dir():
        return 0

    cutoff = time.time() - retention_days * 86400
    deleted = 0
    for entry in logs_dir.glob(f"*{suffix}"):
        with contextlib.suppress(OSError):
            if entry.is_file() and entry.stat().st_mtime < cutoff:
                entry.unlink()
                deleted += 1
    return deleted


def _component(name: str) -> str:
    head, _, rest = name.partition(".")
    if head == "kvgraph" and rest:
        return rest.split(".", 1)[0]
    return head


def _record_extra(record: logging.LogRecord) -> dict[str, object]:
    return {
        k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_ATTRS
    }


class JSONLHandler(logging.Handler):
    """Appends one JSON object per record to ``<logs_dir>/YYYY-MM-DD.jsonl``.

    A new file is opened when the UTC date changes; old files are pruned at
    that point.
    """

    def __init__(
        self,
        logs_dir: Path,
        retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    ):
        super().__init__()
        logs_dir.mkdir(parents=True, exist_ok=True)
        self._logs_dir = logs_dir
        self._retention_days = retention_days
        self._day: str | None = None
        self._stream: TextIO | None = None

    def _stream_for(self, now: datetime) -> TextIO:
        day = now.strftime("%Y-%m-%d")
        if self._stream is None or day != self._day:
            self._close_stream()
            self._day = day
            self._stream = (self._logs_dir / f"{day}.jsonl").open(
                "a", encoding="utf-8"
            )
            prune_old_logs(self._logs_dir, self._retention_days)
        return self._stream

    def _close_stream(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def _entry(self, record: logging.LogRecord, now: datetime) -> dict[str, object]:
        entry: dict[str, object] = {
            "ts": now.isoformat(),
            "level": record.levelname,
            "component": _component(record.name),
            "logger": record.name,
            "message": _redactor.redact(record.getMessage()),
        }
        if record.exc_info:
            formatter = self.formatter or logging.Formatter()
            entry["exception"] = _redactor.redact(
                formatter.formatException(record.exc_info)
            )
        if extra := _record_extra(record):
            entry["extra"] = {
                k: _redactor.redact(v) if isinstance(v, str) else v
                for k, v in json.loads(json.dumps(extra, default=str)).items()
            }
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            now = datetime.now(UTC)
            line = json.dumps(self._entry(record, now))
            stream = self._stream_for(now)
            stream.write(line + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        self._close_stream()
        super().close()


class ComponentFormatter(logging.Formatter):
    """Adds ``%(component)s``: ``kvgraph.graph.manager`` -> ``graph``."""

    def format(self, record: logging.LogRecord) -> str:
        record.component = _component(record.name)
        return super().format(record)


def _resolve_level(level: str | None) -> int:
    name = (level or os.environ.get("KVGRAPH_LOG_LEVEL") or "INFO").upper()
    if name not in LEVELS:
        name = "INFO"
    return getattr(logging, name)


def _console_handler(use_rich: bool) -> logging.Handler:
    if use_rich:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            show_path=False, show_time=True, markup=False
        )
        handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
        return handler

    handler = logging.StreamHandler()
    handler.setFormatter(
        ComponentFormatter(
            "%(asctime)s %(levelname)-7s %(component)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    return handler


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
    log_to_file: bool = False,
    retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
) -> None:
    """Install kvgraph's handlers on the root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. Defaults to KVGRAPH_LOG_LEVEL,
            then INFO.
        use_rich: Rich console output (server mode); uvicorn's own loggers
            are routed through the same handlers.
        log_to_file: Also write JSONL files under $KVGRAPH_HOME/logs.
        retention_days: Days of JSONL files to keep.
    """
    from kvgraph.config.paths import get_logs_path

    log_level = _resolve_level(level)
    handlers = [_console_handler(use_rich)]
    if log_to_file:
        handlers.append(JSONLHandler(get_logs_path(), retention_days=retention_days))

    redacting = RedactingFilter()
    for handler in handlers:
        handler.addFilter(redacting)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if use_rich:
        for name in ("uvicorn", "uvicorn.error"):
            uv_logger = logging.getLogger(name)
            uv_logger.handlers = list(handlers)
            uv_logger.propagate = False
