import signal
import threading
from typing import Callable

from pingdy.logger import PingLogger


class InterruptHandler:
    """
    Перехватывает сигнал прерывания (Ctrl-C) на время опроса.

    На каждый сигнал вызывается stop(), поэтому stop() обязан быть
    идемпотентным. При выходе из блока with восстанавливается прежний
    обработчик сигнала.

        with InterruptHandler(engine.stop):
            engine.run()
    """
    def __init__(
        self,
        stop: Callable[[str], None],
        signum: int = signal.SIGINT,
        logger: PingLogger | None = None,
    ):
        self.stop = stop
        self.signum = signum
        self.num_interrupts = 0
        self._logger = logger or PingLogger()
        self._previous = None
        self._installed = False

    def _handle(self, signum, frame) -> None:
        self.num_interrupts += 1
        self._logger.info("got signal %d, stopping", signum)
        self.stop("interrupted")

    def __enter__(self) -> "InterruptHandler":
        # signal.signal() работает только в главном потоке
        if threading.current_thread() is not threading.main_thread():
            self._logger.warning("not in main thread, signal is not handled")
            return self
        self._previous = signal.signal(self.signum, self._handle)
        self._installed = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._installed:
            previous = self._previous
            if previous is None:
                previous = signal.SIG_DFL
            signal.signal(self.signum, previous)
            self._installed = False
