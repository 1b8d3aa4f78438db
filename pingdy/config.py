from pydantic import BaseModel, ConfigDict, Field


DEFAULT_COUNT = -1
DEFAULT_INTERVAL = 1.0
DEFAULT_TIMEOUT = 100_000.0  # фактически "без ограничения"
DEFAULT_THRESHOLD = 0.001
DEFAULT_SIZE = 64
MAX_SIZE = 996
DEFAULT_TTL = 64


class RunConfig(BaseModel):
    """Параметры запуска. Создаются один раз из аргументов командной строки."""
    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1, description="Target host or IP")
    count: int = Field(
        DEFAULT_COUNT, ge=-1,
        description="Number of echo requests, -1 means unlimited")
    interval: float = Field(
        DEFAULT_INTERVAL, gt=0, description="Seconds between requests")
    timeout: float = Field(
        DEFAULT_TIMEOUT, gt=0, description="Seconds before the run stops")
    privileged: bool = Field(False, description="Use raw sockets")
    threshold: float = Field(
        DEFAULT_THRESHOLD, ge=0, description="RTT threshold in seconds")
    full_log: bool = Field(False, description="Print every reply")
    # icmplib читает ответ в буфер 1024 байта: IP (20) + ICMP (8) + данные
    size: int = Field(
        DEFAULT_SIZE, ge=0, le=MAX_SIZE, description="Payload size, bytes")
    ttl: int = Field(DEFAULT_TTL, ge=1, le=255, description="Outgoing TTL")
