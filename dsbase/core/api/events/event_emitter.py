"""Event emitter for session events ('login', 'reset')."""
from typing import Callable, Dict, List, Optional

from ...logging import get_logger


class EventEmitter:
    """
    Minimal observer registry; handlers run synchronously in emit order.

    A handler that raises is logged and skipped, so host code reacting
    to an event cannot interrupt the operation that emitted it.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}
        self._logger = get_logger('dsbase.events')

    def on(self, event: str, handler: Callable) -> 'EventEmitter':
        """Registers a handler for an event."""
        self._handlers.setdefault(event, []).append(handler)
        return self

    def once(self, event: str, handler: Callable) -> 'EventEmitter':
        """Registers a handler that is removed after its first call."""
        def wrapper(*args, **kwargs):
            self.off(event, wrapper)
            handler(*args, **kwargs)
        return self.on(event, wrapper)

    def off(self, event: str, handler: Optional[Callable] = None) -> 'EventEmitter':
        """Removes one handler, or every handler of the event."""
        if event not in self._handlers:
            return self
        if handler is None:
            del self._handlers[event]
        else:
            self._handlers[event] = [h for h in self._handlers[event] if h != handler]
        return self

    def emit(self, event: str, *args, **kwargs) -> None:
        """Calls every handler registered for the event."""
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(*args, **kwargs)
            except Exception:
                self._logger.exception(f"Handler for '{event}' failed")

    def listeners(self, event: str) -> List[Callable]:
        return list(self._handlers.get(event, ()))
