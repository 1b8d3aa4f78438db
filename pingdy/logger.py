from dataclasses import dataclass
import logging
from typing import Callable, Literal
import uuid
import colorama


class ColoredFormatter(logging.Formatter):
    """
    Форматтер для консоли: цвет строки зависит от уровня записи.

    Основа кода взята отсюда:
    https://alexandra-zaharia.github.io/posts/make-your-own-custom-color-formatter-with-python-logging
    """

    COLORS = {
        logging.DEBUG: colorama.Fore.LIGHTBLACK_EX,
        logging.INFO: colorama.Fore.GREEN,
        logging.WARNING: colorama.Fore.YELLOW,
        logging.ERROR: colorama.Fore.RED + colorama.Style.BRIGHT,
        logging.CRITICAL:
            colorama.Back.RED + colorama.Fore.WHITE + colorama.Style.BRIGHT,
    }

    def __init__(self, fmt: str, style: Literal['{', '%', '$'] = '%'):
        super().__init__(fmt=fmt, style=style)
        self._formatters = {
            level: logging.Formatter(
                color + fmt + colorama.Style.RESET_ALL, style=style)
            for level, color in self.COLORS.items()
        }

    def format(self, record):
        return self._formatters[record.levelno].format(record)


# Формат журнала. Поля runTime (секунд с начала опроса) и runId
# (идентификатор запуска) добавляет PingLogger:
#
# 000012.034000 [DEBUG   ] pingdy (R:972274) (pinger.py:_send) - sent icmp_seq=12

PING_LOGGER_FORMAT = (
    "{runTime:013.06f} [{levelname:8s}] {name} (R:{runId}) "
    "({filename}:{funcName}) - {message}"
)


@dataclass
class LoggerConfig:
    """Настройки журнала. По умолчанию журнал никуда не пишет."""
    fmt: str = PING_LOGGER_FORMAT
    style: Literal['%', '{', '$'] = '{'
    level: int = logging.DEBUG

    use_console: bool = False      # цветной вывод в stderr

    # Имя лог-файла, к нему добавляется runId: pingdy.log -> pingdy_<runId>.log
    file_name: str | None = None


class PingLogger:
    """
    Журнал отладочных сообщений опроса.

    Проксирует debug, info, warning, error к стандартному логгеру и добавляет
    поля runTime и runId. Отчет о пакетах (stdout) сюда не попадает.
    Сообщения передаются через формат-строку: `debug("sent seq=%d", seq)`.
    """
    def __init__(
        self,
        name: str = 'pingdy',
        time_getter: Callable[[], float] | None = None,
        run_id: int | None = None
    ):
        self._logger = logging.getLogger(name)
        self.time_getter = time_getter or (lambda: 0)
        self._run_id: int = run_id or uuid.uuid4().int % 1_000_000
        self._setup_was_called: bool = False

    def set_time_getter(self, fn: Callable[[], float]) -> None:
        self.time_getter = fn

    def setup(
        self,
        config: LoggerConfig | None = None,
        force_run: bool = False
    ) -> None:
        """
        Настроить логгер. Повторные вызовы игнорируются, если не передан
        force_run = True.
        """
        if self._setup_was_called and not force_run:
            return

        config = config or LoggerConfig()
        for handler in self._logger.handlers:
            handler.close()
        self._logger.handlers = []

        if config.use_console:
            s_handler = logging.StreamHandler()
            s_handler.setFormatter(
                ColoredFormatter(config.fmt, style=config.style))
            self._logger.addHandler(s_handler)

        if config.file_name is not None:
            file_name = PingLogger.build_file_name(
                config.file_name, self._run_id)
            # Каждый запуск пишет в свой файл
            f_handler = logging.FileHandler(file_name, mode='w')
            f_handler.setFormatter(
                logging.Formatter(config.fmt, style=config.style))
            self._logger.addHandler(f_handler)

        if not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

        self._logger.propagate = False
        self._logger.setLevel(config.level)
        self._setup_was_called = True

    def _get_extra(self):
        return {
            "runTime": self.time_getter(),
            "runId": self._run_id,
        }

    def debug(self, msg, *args, **kwargs):
        self._logger.debug(
            msg, *args, **kwargs,
            extra=self._get_extra(),
            stacklevel=2,  # skip PingLogger.debug()
        )

    def info(self, msg, *args, **kwargs):
        self._logger.info(
            msg, *args, **kwargs, extra=self._get_extra(), stacklevel=2)

    def warning(self, msg, *args, **kwargs):
        self._logger.warning(
            msg, *args, **kwargs, extra=self._get_extra(), stacklevel=2)

    def error(self, msg, *args, **kwargs):
        self._logger.error(
            msg, *args, **kwargs, extra=self._get_extra(), stacklevel=2)

    @staticmethod
    def build_file_name(file_name: str, run_id: int, sep: str = "_"):
        """Построить имя файла.

        "something.log" и run_id = 123 дают "something_123.log". Если
        расширения нет или оно не "log", run_id дописывается в конец:
        "something_123", "something.ext_123".
        """
        file_name = file_name.strip()
        ext_pos = file_name.rfind('.')
        if ext_pos >= 0 and file_name[ext_pos+1:].lower() == "log":
            return file_name[:ext_pos] + sep + str(run_id) + file_name[ext_pos:]
        return file_name + sep + str(run_id)
