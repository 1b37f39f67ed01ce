import logging
import time
from typing import Callable


logger = logging.getLogger(__name__)


class TimerHandle:
    """A pending delayed call. ``cancel()`` stops it from running if it has not fired yet."""

    def __init__(self, delay: float, callback: Callable, args=()):
        self.delay = delay
        self.deadline = time.time() + delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def run(self) -> None:
        if not self.pending:
            return
        self.fired = True
        self.callback(*self.args)


class SocketIOScheduler:
    """Delayed callbacks on Socket.IO background tasks.

    Uses ``socketio.sleep`` so timers cooperate with whichever async mode
    the server runs under (threading, eventlet, gevent).
    """

    def __init__(self, socketio):
        self.socketio = socketio

    def call_later(self, delay: float, callback: Callable, *args) -> TimerHandle:
        handle = TimerHandle(delay, callback, args)

        def _runner(h: TimerHandle):
            sleep_for = max(0.0, h.deadline - time.time())
            if sleep_for:
                self.socketio.sleep(sleep_for)
            if h.cancelled:
                return
            try:
                h.run()
            except Exception:
                logger.exception("[timer-error] callback %r failed", h.callback)

        self.socketio.start_background_task(_runner, handle)
        return handle
