from .engine import Engine, EventHandler, PingError, HostResolutionError, \
    RunError

from .pinger import Pinger, open_icmp_socket
