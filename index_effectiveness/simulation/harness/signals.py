"""Process signal wiring for long-running experiments."""

from __future__ import annotations

import logging
import signal
from typing import Any, Callable

from index_effectiveness.simulation.harness.cancellation import CancellationToken

LOGGER = logging.getLogger(__name__)


def install_signal_handlers(token: CancellationToken) -> Callable[[], None]:
    """Route SIGINT to a cooperative stop and SIGUSR1 to a dump request.

    A second SIGINT while a stop is already pending raises
    ``KeyboardInterrupt``. Returns a callable restoring the previous
    handlers. Outside the main thread, or on platforms without SIGUSR1,
    the missing handlers are skipped.
    """
    previous: dict[int, Any] = {}

    def _on_interrupt(signum: int, frame: Any) -> None:
        if token.cancelled:
            raise KeyboardInterrupt
        LOGGER.warning("Interrupt received, stopping after in-flight trajectories")
        token.cancel()

    def _on_dump(signum: int, frame: Any) -> None:
        token.request_dump()

    handlers: list[tuple[int | None, Callable[[int, Any], None]]] = [
        (signal.SIGINT, _on_interrupt),
        (getattr(signal, "SIGUSR1", None), _on_dump),
    ]
    for sig, handler in handlers:
        if sig is None:
            continue
        try:
            previous[sig] = signal.signal(sig, handler)
        except (ValueError, OSError) as exc:
            LOGGER.debug("Signal handler not installed", extra={"signal": sig, "error": str(exc)})

    def _restore() -> None:
        for sig, handler in previous.items():
            try:
                signal.signal(sig, handler)
            except (ValueError, OSError):
                continue
        previous.clear()

    return _restore
