"""Observability — structured discovery logs and the per-request access log.

Invariants:
    - Every record carries timestamp, level, logger and message
    - Discovery context (unit, module, phase, route version, error code) travels as
      record attributes and is rendered by both formats, never baked into the message
    - One access-log line per HTTP request, written after the response is produced
    - setup_logging() replaces its own handler on repeat calls instead of stacking a second one

Design Decisions:
    - The access log replaces uvicorn's: uvicorn.access is silenced so each request logs once
"""

import json
import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request

ACCESS_LOGGER = "endurance.access"

DISCOVERY_FIELDS = ("module_name", "phase", "unit_path", "base_path", "version", "error_code")
ACCESS_FIELDS = ("method", "path", "status_code", "duration_ms", "client")

access_logger = logging.getLogger(ACCESS_LOGGER)


def _context(record: logging.LogRecord) -> dict:
    context = {}
    for key in DISCOVERY_FIELDS + ACCESS_FIELDS:
        val = record.__dict__.get(key)
        if val is not None:
            context[key] = val
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per record, discovery and access fields at top level."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class ContextFormatter(logging.Formatter):
    """Human-readable line; discovery context appended as key=value pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        # access lines already spell out method, path and status
        if record.name == ACCESS_LOGGER:
            return line
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


class _EnduranceHandler(logging.StreamHandler):
    pass


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure root logging for an Endurance process."""
    handler = _EnduranceHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else ContextFormatter())
    for existing in [h for h in logging.root.handlers if isinstance(h, _EnduranceHandler)]:
        logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("uvicorn.access").disabled = True


def install_access_log(app: FastAPI) -> None:
    """Log every request in combined-log spirit: client, request line, status, latency, agent."""

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        client = request.client.host if request.client else "-"
        target = request.url.path + (f"?{request.url.query}" if request.url.query else "")
        access_logger.info(
            f'{client} "{request.method} {target} HTTP/{request.scope.get("http_version", "1.1")}" '
            f'{response.status_code} {response.headers.get("content-length", "-")} '
            f'"{request.headers.get("referer", "-")}" "{request.headers.get("user-agent", "-")}" '
            f"{duration_ms}ms",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "client": client,
            },
        )
        return response
