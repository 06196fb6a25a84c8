"""Transport protocol: what the logging handler expects of a notifier."""
from __future__ import annotations

from typing import Any, Callable, Protocol

Callback = Callable[[Exception | None, bool], Any]
Listener = Callable[..., Any]


class Transport(Protocol):
    """Abstract interface for a log transport."""

    level: str

    async def log(
        self,
        level: str,
        message: str,
        metadata: Any = None,
        callback: Callback | None = None,
    ) -> bool: ...

    def on(self, event: str, listener: Listener) -> None: ...
