from abc import ABC, abstractmethod
from typing import Protocol

from pingdy.objects import Event, RunStatistics


class PingError(Exception):
    """Базовое исключение движка."""
    ...


class HostResolutionError(PingError):
    """Не удалось определить адрес цели, опрос не запускался."""
    ...


class RunError(PingError):
    """Ошибка во время опроса (нет прав на raw-сокет, сеть недоступна...)."""
    ...


class EventHandler(Protocol):
    def handle(self, event: Event) -> None: ...


class Engine(ABC):
    """
    Узкий интерфейс движка ICMP Echo.

    Конструктор реализации принимает имя цели и при неудачном разрешении
    имени бросает HostResolutionError. Метод run() блокирует вызывающий
    поток и доставляет события обработчику синхронно, в порядке обработки
    пакетов. Метод stop() можно вызывать из любого потока и сколько угодно
    раз.
    """

    @property
    @abstractmethod
    def addr(self) -> str:
        """Цель в том виде, в котором ее передали."""

    @property
    @abstractmethod
    def ip_addr(self) -> str:
        """Адрес цели после разрешения имени."""

    @abstractmethod
    def set_handler(self, handler: EventHandler | None) -> None:
        ...

    @abstractmethod
    def run(self) -> RunStatistics:
        """
        Выполнить опрос.

        Raises:
            RunError: если опрос не удалось выполнить
        """

    @abstractmethod
    def stop(self, msg: str = "") -> None:
        ...

    @abstractmethod
    def statistics(self) -> RunStatistics:
        """Статистика на текущий момент (в том числе после ошибки)."""

    @property
    def elapsed(self) -> float:
        """Секунд с начала опроса, 0 если опрос еще не начался."""
        return 0.0
