from datetime import datetime
from typing import Callable

import click

from pingdy.config import RunConfig
from pingdy.durations import format_duration, format_float
from pingdy.objects import (
    DuplicateReceived,
    Event,
    PacketEvent,
    PacketReceived,
    RunFinished,
    RunStatistics,
)


Echo = Callable[[str], None]


def format_timestamp(moment: datetime) -> str:
    """Дата в виде "Mon Jan  2 15:04:05 MST 2006" (день дополняется пробелом)."""
    moment = moment.astimezone()
    return (f"{moment:%a %b} {moment.day:2d} "
            f"{moment:%H:%M:%S} {moment.tzname()} {moment:%Y}")


def _ttl(packet: PacketEvent) -> str:
    return '?' if packet.ttl is None else str(packet.ttl)


def format_threshold_line(packet: PacketEvent, moment: datetime) -> str:
    return (f"{format_timestamp(moment)} ~~ {packet.nbytes} bytes from "
            f"{packet.ip_addr}: icmp_seq={packet.seq} "
            f"rtt={format_duration(packet.rtt)} ttl={_ttl(packet)}")


def format_packet_line(packet: PacketEvent) -> str:
    return (f"{packet.nbytes} bytes from {packet.ip_addr}: "
            f"icmp_seq={packet.seq} time={format_duration(packet.rtt)} "
            f"ttl={_ttl(packet)}")


def print_summary(stats: RunStatistics, echo: Echo = click.echo) -> None:
    """Итоговая статистика опроса. Ничего не вычисляет, только форматирует."""
    echo(f"\n--- {stats.addr} ping statistics ---")
    echo(f"{stats.packets_sent} packets transmitted, "
         f"{stats.packets_recv} packets received, "
         f"{stats.packets_recv_duplicates} duplicates, "
         f"{format_float(stats.packet_loss)}% packet loss")
    echo("round-trip min/avg/max/stddev = "
         f"{format_duration(stats.min_rtt)}/{format_duration(stats.avg_rtt)}/"
         f"{format_duration(stats.max_rtt)}/{format_duration(stats.stddev_rtt)}")


class EventReporter:
    """
    Обработчик событий движка.

    - PacketReceived: строка с меткой времени, если RTT больше порога,
      и (независимо от нее) строка полного журнала, если включен full_log;
    - DuplicateReceived: всегда строка с пометкой (DUP!);
    - RunFinished: итоговая статистика.
    """
    def __init__(
        self,
        config: RunConfig,
        echo: Echo = click.echo,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.echo = echo
        self.clock = clock

    def handle(self, event: Event) -> None:
        if isinstance(event, PacketReceived):
            self.handle_receive(event.packet)
        elif isinstance(event, DuplicateReceived):
            self.handle_duplicate(event.packet)
        elif isinstance(event, RunFinished):
            self.handle_finish(event.statistics)
        else:
            raise TypeError(f"unexpected event {event!r}")

    def handle_receive(self, packet: PacketEvent) -> None:
        if packet.rtt > self.config.threshold:
            self.echo(format_threshold_line(packet, self.clock()))
        if self.config.full_log:
            self.echo(format_packet_line(packet))

    def handle_duplicate(self, packet: PacketEvent) -> None:
        self.echo(format_packet_line(packet) + " (DUP!)")

    def handle_finish(self, stats: RunStatistics) -> None:
        print_summary(stats, self.echo)
