import threading
import logging

log = logging.getLogger(__name__)


class Ticker:
    """Runs `fn` every `interval` seconds on a daemon thread.

    The next tick is only scheduled after `fn` returns, so two ticks never
    overlap. `stop_event` doubles as the cancellation token the work
    function checks between units.
    """

    def __init__(self, interval: float, fn, stop_event: threading.Event | None = None, name: str = "ticker"):
        self.interval = interval
        self.fn = fn
        self.stop_event = stop_event or threading.Event()
        self.name = name
        self._thread: threading.Thread | None = None

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_alive:
            return
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self.stop_event.wait(self.interval):
            try:
                self.fn()
            except Exception:
                log.exception(f"❌ Error in {self.name} tick")

    def cancel(self, timeout: float | None = None) -> None:
        self.stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
