import pytest

from pingdy.objects import (
    DuplicateReceived,
    ExitReason,
    PacketEvent,
    PacketReceived,
    RunFinished,
    RunStatistics,
)
from pingdy.ping import Engine, HostResolutionError, RunError


class FakeEngine(Engine):
    """
    Движок-заглушка: при run() доставляет обработчику заранее заданные
    пакеты. Элемент script - пара ("recv" | "dup", PacketEvent).
    """
    def __init__(self, host, script=(), fail_with=None, ip_addr='10.0.0.1'):
        self._addr = host
        self._ip_addr = ip_addr
        self.script = list(script)
        self.fail_with = fail_with
        self.handler = None
        self.stop_calls = 0
        self.num_runs = 0
        self._rtts = []
        self._sent = 0
        self._dups = 0

    @property
    def addr(self):
        return self._addr

    @property
    def ip_addr(self):
        return self._ip_addr

    def set_handler(self, handler):
        self.handler = handler

    def stop(self, msg=""):
        self.stop_calls += 1

    def statistics(self):
        sent = self._sent
        recv = len(self._rtts)
        return RunStatistics(
            addr=self._addr,
            ip_addr=self._ip_addr,
            packets_sent=sent,
            packets_recv=recv,
            packets_recv_duplicates=self._dups,
            packet_loss=(sent - recv) / sent * 100 if sent else 0.0,
            min_rtt=min(self._rtts, default=0.0),
            avg_rtt=sum(self._rtts) / recv if recv else 0.0,
            max_rtt=max(self._rtts, default=0.0),
            rtts=list(self._rtts),
            exit_reason=ExitReason.COUNT_REACHED,
        )

    def run(self):
        self.num_runs += 1
        for kind, packet in self.script:
            if kind == 'dup':
                self._dups += 1
                self.handler.handle(DuplicateReceived(packet=packet))
            else:
                self._sent += 1
                self._rtts.append(packet.rtt)
                self.handler.handle(PacketReceived(packet=packet))
        if self.fail_with is not None:
            raise RunError(self.fail_with)
        result = self.statistics()
        self.handler.handle(RunFinished(statistics=result))
        return result


def make_packet(seq=1, rtt=0.05, nbytes=72, ip_addr='10.0.0.1', ttl=57):
    return PacketEvent(
        nbytes=nbytes, ip_addr=ip_addr, seq=seq, rtt=rtt, ttl=ttl)


@pytest.fixture
def engine_factory():
    """
    Фабрика, совместимая с run_pingdy(). Созданные движки сохраняются
    в factory.engines.
    """
    def factory(host, config, logger):
        if host == 'unknown.invalid':
            raise HostResolutionError(f'cannot resolve host "{host}"')
        engine = FakeEngine(host, script=factory.script,
                            fail_with=factory.fail_with)
        factory.engines.append(engine)
        return engine

    factory.script = []
    factory.fail_with = None
    factory.engines = []
    return factory
