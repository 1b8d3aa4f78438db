from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExitReason(Enum):
    COUNT_REACHED = 0
    TIMEOUT = 1
    STOPPED = 2
    FAILED = 3


class PacketEvent(BaseModel):
    """Данные одного принятого Echo Reply (исходного или дубликата)."""
    model_config = ConfigDict(frozen=True)

    nbytes: int = Field(..., description="Bytes received")
    ip_addr: str = Field(..., description="Source address of the reply")
    seq: int = Field(..., description="ICMP sequence number")
    rtt: float = Field(..., description="Round-trip time, seconds")
    ttl: int | None = Field(None, description="TTL of the reply if known")


class RunStatistics(BaseModel):
    addr: str = Field(..., description="Target host as given")
    ip_addr: str = Field('', description="Resolved target address")
    packets_sent: int = 0
    packets_recv: int = 0
    packets_recv_duplicates: int = 0
    packet_loss: float = Field(0.0, description="Packet loss, percent")
    min_rtt: float = 0.0
    avg_rtt: float = 0.0
    max_rtt: float = 0.0
    stddev_rtt: float = 0.0
    rtts: list[float] = Field(default_factory=list)
    exit_reason: ExitReason | None = None


# События, которые движок передает обработчику. Порядок доставки совпадает
# с порядком обработки пакетов движком.

class PacketReceived(BaseModel):
    packet: PacketEvent


class DuplicateReceived(BaseModel):
    packet: PacketEvent


class RunFinished(BaseModel):
    statistics: RunStatistics


Event = PacketReceived | DuplicateReceived | RunFinished
