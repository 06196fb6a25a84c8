"""Bridge between the ``logging`` package and the Mailgun notifier."""
from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import sys
import threading
from typing import Any, Callable

from .config import NotifierConfig
from .interfaces.transport import Transport
from .notifications import MailgunNotifier

logger = logging.getLogger(__name__)

# Records from this package never reach the transport.
_OWN_LOGGER = __name__.split(".")[0]

# winston's npm level labels next to the stdlib numeric levels.
LEVELS: dict[str, int] = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "http": 17,
    "verbose": 15,
    "debug": logging.DEBUG,
    "silly": 5,
    "critical": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "warning": logging.WARNING,
    "notset": logging.NOTSET,
}


def resolve_level(label: str | int) -> int:
    """Map a level label (winston or stdlib, any case) to a numeric level."""
    if isinstance(label, int):
        return label
    try:
        return LEVELS[label.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level '{label}'") from None


class MailgunHandler(logging.Handler):
    """``logging.Handler`` that mails each record through a notifier.

    Pass structured metadata with ``extra={"metadata": {...}}``. Sends run
    on a background event loop owned by the handler, so :meth:`emit`
    returns without waiting for Mailgun. :meth:`flush` and :meth:`drain`
    wait for outstanding sends; :meth:`close` also stops the loop.
    """

    def __init__(self, notifier: Transport) -> None:
        super().__init__(level=resolve_level(notifier.level))
        self.notifier = notifier
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._loop_lock = threading.Lock()
        self._pending: set[concurrent.futures.Future[bool]] = set()
        self._pending_lock = threading.Lock()

    @staticmethod
    def _is_own(record: logging.LogRecord) -> bool:
        return record.name == _OWN_LOGGER or record.name.startswith(_OWN_LOGGER + ".")

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._loop_lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="mailgun-logging", daemon=True
                )
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    def emit(self, record: logging.LogRecord) -> None:
        if self._is_own(record):
            return
        coro = None
        try:
            message = self.format(record)
            metadata = getattr(record, "metadata", None)
            loop = self._ensure_loop()
            coro = self.notifier.log(record.levelname.lower(), message, metadata)
            future = asyncio.run_coroutine_threadsafe(coro, loop)
        except Exception:
            if coro is not None:
                coro.close()
            self.handleError(record)
            return

        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._send_done)

    def _send_done(self, future: concurrent.futures.Future[bool]) -> None:
        with self._pending_lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Mailgun transport failed: %r", exc)

    def _snapshot(self) -> list[concurrent.futures.Future[bool]]:
        with self._pending_lock:
            return list(self._pending)

    @property
    def pending(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    def flush(self, timeout: float | None = None) -> None:
        """Block until every scheduled send has finished or ``timeout`` passes."""
        futures = self._snapshot()
        if futures:
            done, _ = concurrent.futures.wait(futures, timeout=timeout)
            with self._pending_lock:
                self._pending.difference_update(done)

    async def drain(self) -> None:
        """Wait for every scheduled send to finish without blocking the loop."""
        while futures := self._snapshot():
            await asyncio.gather(
                *(asyncio.wrap_future(f) for f in futures), return_exceptions=True
            )
            with self._pending_lock:
                self._pending.difference_update(futures)

    def close(self) -> None:
        self.flush()
        with self._loop_lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is not None:
            loop.call_soon_threadsafe(loop.stop)
            if thread is not None:
                thread.join()
            loop.close()
        super().close()


def install_exception_hook(handler: MailgunHandler) -> Callable[..., Any]:
    """Report uncaught exceptions through ``handler``.

    The hook waits for the resulting send before calling the previous
    ``sys.excepthook``, which is returned.
    """
    previous = sys.excepthook

    def hook(exc_type, exc, tb):
        if not issubclass(exc_type, KeyboardInterrupt):
            record = logging.LogRecord(
                name="uncaught",
                level=logging.ERROR,
                pathname="",
                lineno=0,
                msg="Uncaught exception: %s",
                args=(exc,),
                exc_info=(exc_type, exc, tb),
            )
            if record.levelno >= handler.level:
                handler.handle(record)
                handler.flush()
        previous(exc_type, exc, tb)

    sys.excepthook = hook
    return previous


def build_handler(config: NotifierConfig) -> MailgunHandler:
    """Build notifier and handler, installing the exception hook if enabled."""
    notifier = MailgunNotifier.create(config)
    handler = MailgunHandler(notifier)
    if notifier.handle_exceptions:
        install_exception_hook(handler)
    return handler
