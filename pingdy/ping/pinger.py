import statistics as stats_lib
import threading
import time
from typing import Callable

from icmplib import (
    ICMPError,
    ICMPLibError,
    ICMPRequest,
    ICMPv4Socket,
    ICMPv6Socket,
    NameLookupError,
    TimeoutExceeded,
    is_ipv6_address,
    resolve,
)
from icmplib.utils import unique_identifier

from pingdy.config import (
    DEFAULT_COUNT,
    DEFAULT_INTERVAL,
    DEFAULT_SIZE,
    DEFAULT_TIMEOUT,
    DEFAULT_TTL,
    RunConfig,
)
from pingdy.logger import PingLogger
from pingdy.objects import (
    DuplicateReceived,
    Event,
    ExitReason,
    PacketEvent,
    PacketReceived,
    RunFinished,
    RunStatistics,
)
from pingdy.ping.engine import (
    Engine,
    EventHandler,
    HostResolutionError,
    RunError,
)


ECHO_REPLY_V4 = 0
ECHO_REPLY_V6 = 129
MAX_SEQUENCE = 65536

# Максимальное время ожидания в одном вызове receive(). От него зависит,
# как быстро цикл заметит stop().
POLL_INTERVAL = 0.1
MIN_WAIT = 0.001

# После последнего запроса ждем ответы не дольше max(interval, GRACE_PERIOD)
GRACE_PERIOD = 1.0

SocketFactory = Callable[[str, bool], ICMPv4Socket | ICMPv6Socket]


def open_icmp_socket(ip_addr: str, privileged: bool):
    """Открыть сокет icmplib нужного семейства адресов."""
    if is_ipv6_address(ip_addr):
        return ICMPv6Socket(privileged=privileged)
    return ICMPv4Socket(privileged=privileged)


class Pinger(Engine):
    """
    Движок ICMP Echo поверх icmplib.

    Работа с пакетами (сборка, контрольные суммы, raw и unprivileged сокеты)
    выполняется icmplib. Здесь - расписание отправки запросов, сопоставление
    ответов с номерами последовательности, обнаружение дубликатов и
    статистика.

    Поля count, interval, timeout, privileged, size, ttl можно менять
    до вызова run() напрямую или через configure().
    """
    def __init__(
        self,
        host: str,
        config: RunConfig | None = None,
        logger: PingLogger | None = None,
        socket_factory: SocketFactory | None = None,
    ):
        self._addr = host
        try:
            self._ip_addr = resolve(host)[0]
        except (NameLookupError, IndexError) as err:
            raise HostResolutionError(
                f"cannot resolve host \"{host}\"") from err

        self.count: int = DEFAULT_COUNT
        self.interval: float = DEFAULT_INTERVAL
        self.timeout: float = DEFAULT_TIMEOUT
        self.privileged: bool = False
        self.size: int = DEFAULT_SIZE
        self.ttl: int = DEFAULT_TTL
        if config is not None:
            self.configure(config)

        if logger is None:
            logger = PingLogger()
            logger.setup()
        self._logger = logger
        self._logger.set_time_getter(lambda: self.elapsed)
        self._socket_factory = socket_factory or open_icmp_socket
        self._handler: EventHandler | None = None
        self._stop_event = threading.Event()
        self._stop_msg = ''

        self._id = unique_identifier()
        self._t_start: float | None = None
        self._reset()

    def _reset(self) -> None:
        self._sequence = 0
        self._sent_at: dict[int, float] = {}
        self._received: set[int] = set()
        self._rtts: list[float] = []
        self._packets_sent = 0
        self._packets_recv = 0
        self._packets_recv_duplicates = 0
        self._last_send: float | None = None
        self._exit_reason: ExitReason | None = None

    # ------------------------------------------------------------------
    # Engine API
    # ------------------------------------------------------------------
    @property
    def addr(self) -> str:
        return self._addr

    @property
    def ip_addr(self) -> str:
        return self._ip_addr

    @property
    def elapsed(self) -> float:
        if self._t_start is None:
            return 0.0
        return time.monotonic() - self._t_start

    def configure(self, config: RunConfig) -> None:
        self.count = config.count
        self.interval = config.interval
        self.timeout = config.timeout
        self.privileged = config.privileged
        self.size = config.size
        self.ttl = config.ttl

    def set_handler(self, handler: EventHandler | None) -> None:
        self._handler = handler

    def stop(self, msg: str = "") -> None:
        if not self._stop_event.is_set():
            self._stop_msg = msg
            self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self) -> RunStatistics:
        # Каждый запуск начинается со сброшенного флага остановки
        self._stop_event.clear()
        self._stop_msg = ''
        self._reset()
        self._t_start = time.monotonic()
        self._logger.debug(
            "start pinging %s (%s), count=%d interval=%.3fs timeout=%.3fs "
            "privileged=%s", self.addr, self.ip_addr, self.count,
            self.interval, self.timeout, self.privileged)

        try:
            sock = self._socket_factory(self.ip_addr, self.privileged)
        except ICMPLibError as err:
            self._exit_reason = ExitReason.FAILED
            self._logger.error("cannot open socket: %s", err)
            raise RunError(str(err)) from err

        with sock:
            try:
                self._loop(sock)
            except ICMPLibError as err:
                self._exit_reason = ExitReason.FAILED
                self._logger.error("run failed: %s", err)
                raise RunError(str(err)) from err

        result = self.statistics()
        self._logger.info(
            "finished: %s, sent=%d received=%d duplicates=%d",
            self._exit_reason, result.packets_sent, result.packets_recv,
            result.packets_recv_duplicates)
        self._emit(RunFinished(statistics=result))
        return result

    def statistics(self) -> RunStatistics:
        sent = self._packets_sent
        recv = self._packets_recv
        loss = (sent - recv) / sent * 100 if sent > 0 else 0.0
        rtts = list(self._rtts)
        return RunStatistics(
            addr=self.addr,
            ip_addr=self.ip_addr,
            packets_sent=sent,
            packets_recv=recv,
            packets_recv_duplicates=self._packets_recv_duplicates,
            packet_loss=loss,
            min_rtt=min(rtts) if rtts else 0.0,
            avg_rtt=stats_lib.fmean(rtts) if rtts else 0.0,
            max_rtt=max(rtts) if rtts else 0.0,
            stddev_rtt=stats_lib.pstdev(rtts) if rtts else 0.0,
            rtts=rtts,
            exit_reason=self._exit_reason,
        )

    # ------------------------------------------------------------------
    # Цикл опроса
    # ------------------------------------------------------------------
    def stop_conditions(self) -> bool:
        """Возвращает True, если пора завершать опрос."""
        if self._stop_event.is_set():
            self._exit_reason = ExitReason.STOPPED
            self._logger.debug("stopped %s", self._stop_msg)
            return True
        if self.elapsed >= self.timeout:
            self._exit_reason = ExitReason.TIMEOUT
            return True
        if 0 <= self.count <= self._packets_sent:
            if self._packets_recv >= self.count:
                self._exit_reason = ExitReason.COUNT_REACHED
                return True
            grace = max(self.interval, GRACE_PERIOD)
            if (self._last_send is not None and
                    time.monotonic() - self._last_send >= grace):
                self._exit_reason = ExitReason.COUNT_REACHED
                return True
        return False

    def _may_send(self) -> bool:
        return self.count < 0 or self._packets_sent < self.count

    def _loop(self, sock) -> None:
        next_send = time.monotonic()
        while not self.stop_conditions():
            now = time.monotonic()
            if self._may_send() and now >= next_send:
                self._send(sock)
                next_send += self.interval
                if next_send < now:
                    next_send = now + self.interval
                continue

            wait = min(POLL_INTERVAL, self.timeout - self.elapsed)
            if self._may_send():
                wait = min(wait, next_send - now)
            self._receive(sock, max(wait, MIN_WAIT))

    def _send(self, sock) -> None:
        seq = self._sequence % MAX_SEQUENCE
        self._sequence += 1
        request = ICMPRequest(
            destination=self.ip_addr,
            id=self._id,
            sequence=seq,
            payload_size=self.size,
            ttl=self.ttl,
        )
        sock.send(request)
        self._sent_at[seq] = time.time()
        self._received.discard(seq)
        self._packets_sent += 1
        self._last_send = time.monotonic()
        self._logger.debug("sent icmp_seq=%d", seq)

    def _receive(self, sock, timeout: float) -> None:
        try:
            reply = sock.receive(None, timeout)
        except TimeoutExceeded:
            return

        if self.privileged and reply.id != self._id:
            return
        try:
            reply.raise_for_status()
        except ICMPError as err:
            self._logger.warning(
                "icmp_seq=%d: %s from %s", reply.sequence, err, reply.source)
            return
        if reply.type not in (ECHO_REPLY_V4, ECHO_REPLY_V6):
            return

        seq = reply.sequence
        sent_at = self._sent_at.get(seq)
        if sent_at is None:
            self._logger.debug("unexpected reply icmp_seq=%d", seq)
            return

        packet = PacketEvent(
            nbytes=reply.bytes_received,
            ip_addr=reply.source,
            seq=seq,
            rtt=max(reply.time - sent_at, 0.0),
            ttl=None,
        )
        if seq in self._received:
            self._packets_recv_duplicates += 1
            self._emit(DuplicateReceived(packet=packet))
        else:
            self._received.add(seq)
            self._rtts.append(packet.rtt)
            self._packets_recv += 1
            self._emit(PacketReceived(packet=packet))

    def _emit(self, event: Event) -> None:
        if self._handler is not None:
            self._handler.handle(event)
