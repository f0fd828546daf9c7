"""
Client-side error capture for a single page.

ClientErrorCapture subscribes to the page's console, pageerror and
requestfailed events for the lifetime of a ``with`` block and appends to
buckets it owns. ConsoleRecorder is the richer variant that keeps the full
message metadata for reporting.
"""
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError

logger = logging.getLogger(__name__)

NO_STACK = "No stack trace"
UNSERIALIZABLE = "[Unable to serialize]"


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ClientErrorBuckets:
    console_errors: List[str] = field(default_factory=list)
    page_errors: List[str] = field(default_factory=list)
    request_failures: List[str] = field(default_factory=list)

    def clear(self):
        self.console_errors.clear()
        self.page_errors.clear()
        self.request_failures.clear()


def format_console_error(msg):
    return f"[console.{msg.type}] {msg.text}"


def format_page_error(error):
    return f"[pageerror] {error.message}\n{error.stack or NO_STACK}"


def format_request_failure(request):
    return f"[requestfailed {request.failure}] {request.url}"


class _Subscription:
    """Registers page listeners on enter and removes them on exit."""

    def __init__(self, page):
        self.page = page
        self._handlers = []

    def _listen(self, event, handler):
        self.page.on(event, handler)
        self._handlers.append((event, handler))

    def _unlisten_all(self):
        while self._handlers:
            event, handler = self._handlers.pop()
            self.page.remove_listener(event, handler)


class ClientErrorCapture(_Subscription):
    """
    Fill ClientErrorBuckets while the block runs.

    Requests to ignore_urls (e.g. the audit engine's own script) are not
    counted, nor are console errors reported against those URLs.
    """

    def __init__(self, page, buckets: Optional[ClientErrorBuckets] = None, ignore_urls=()):
        super().__init__(page)
        self.buckets = buckets if buckets is not None else ClientErrorBuckets()
        self.ignore_urls = frozenset(ignore_urls)

    def _on_console(self, msg):
        if (msg.location or {}).get("url") in self.ignore_urls:
            return
        if msg.type == "error":
            self.buckets.console_errors.append(format_console_error(msg))

    def _on_page_error(self, error):
        self.buckets.page_errors.append(format_page_error(error))

    def _on_request_failed(self, request):
        if request.url in self.ignore_urls:
            return
        self.buckets.request_failures.append(format_request_failure(request))

    def __enter__(self):
        self.buckets.clear()
        self._listen("console", self._on_console)
        self._listen("pageerror", self._on_page_error)
        self._listen("requestfailed", self._on_request_failed)
        return self.buckets

    def __exit__(self, exc_type, exc, tb):
        self._unlisten_all()
        return False


def client_error_failures(buckets: ClientErrorBuckets) -> List[str]:
    """One failure message per non-empty bucket; every bucket is checked."""
    failures = []
    for label, bucket in (
        ("Console errors", buckets.console_errors),
        ("Page errors", buckets.page_errors),
        ("Request failures", buckets.request_failures),
    ):
        if bucket:
            failures.append(f"{label}: \n" + "\n".join(bucket))
    return failures


def expect_no_client_errors(page, buckets: ClientErrorBuckets, wait_for_network_idle=True):
    if wait_for_network_idle:
        # let late errors flush after navigation
        page.wait_for_load_state("networkidle")
    failures = client_error_failures(buckets)
    assert not failures, "\n\n".join(failures)


@dataclass
class ConsoleMessageRecord:
    type: str
    text: str
    location: str
    timestamp: str
    severity: str
    source: str = ""
    stack: Optional[str] = None
    args: List[str] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


def _serialize_args(msg):
    out = []
    for arg in msg.args:
        try:
            out.append(arg.json_value())
        except PlaywrightError:
            out.append(UNSERIALIZABLE)
    return out


class ConsoleRecorder(_Subscription):
    """Keeps error and warning console messages (and info, if asked) with metadata."""

    def __init__(self, page, include_info=False):
        super().__init__(page)
        self.levels = {"error": "error", "warning": "warning"}
        if include_info:
            self.levels["info"] = "info"
            self.levels["log"] = "info"
        self.messages: List[ConsoleMessageRecord] = []

    def _on_console(self, msg):
        severity = self.levels.get(msg.type)
        if severity is None:
            return
        location = msg.location or {}
        self.messages.append(ConsoleMessageRecord(
            type=msg.type,
            text=msg.text,
            location=f"{location.get('url', '')}:{location.get('lineNumber', 0)}",
            timestamp=_now_iso(),
            severity=severity,
            source=location.get("url", ""),
            args=_serialize_args(msg),
        ))

    def _on_page_error(self, error):
        stack = error.stack
        self.messages.append(ConsoleMessageRecord(
            type="uncaught exception",
            text=error.message,
            location=stack.split("\n")[0] if stack else "No location",
            timestamp=_now_iso(),
            severity="error",
            source="runtime",
            stack=stack,
        ))

    @property
    def errors(self):
        return [m for m in self.messages if m.severity == "error"]

    @property
    def warnings(self):
        return [m for m in self.messages if m.severity == "warning"]

    def report(self, url):
        return {
            "url": url,
            "timestamp": _now_iso(),
            "errors": [m.to_dict() for m in self.errors],
        }

    def log_errors(self):
        for m in self.errors:
            logger.error("[%s] %s\n  at %s\n  time: %s", m.type, m.text, m.location, m.timestamp)

    def __enter__(self):
        self.messages = []
        self._listen("console", self._on_console)
        self._listen("pageerror", self._on_page_error)
        return self

    def __exit__(self, exc_type, exc, tb):
        self._unlisten_all()
        return False
