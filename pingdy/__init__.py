from .config import RunConfig
from .objects import PacketEvent, RunStatistics, ExitReason
