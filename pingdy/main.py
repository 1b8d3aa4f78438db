import logging
from typing import Callable

import click
from pydantic import ValidationError

from pingdy.config import (
    DEFAULT_COUNT,
    DEFAULT_INTERVAL,
    DEFAULT_SIZE,
    DEFAULT_THRESHOLD,
    DEFAULT_TIMEOUT,
    RunConfig,
)
from pingdy.durations import DURATION, format_duration
from pingdy.handlers import Echo, EventReporter, print_summary
from pingdy.logger import LoggerConfig, PingLogger
from pingdy.ping import Engine, HostResolutionError, Pinger, RunError
from pingdy.signals import InterruptHandler


USAGE = """
Usage:
    ping [-c count] [-i interval] [-t timeout] [-z fail threshold] [-f full log] [--privileged] host
Examples:
	# logs when RTT (round trip time) exceeds 100ms with full log
	$ pingdy -f -i 200ms -z 100ms 192.168.99.20

	# logs when RTT exceeds 187ms for 100 packets
	$ pingdy -c 100 -i 400ms -z 187ms 192.168.99.20

	# logs when RTT exceeds 0.890ms aka 890microseconds
	pingdy -i 200ms -z 0.890ms 192.168.99.20

	# logs when RTT exceeds 2000ms aka 2seconds
	pingdy -i 200ms -z 1000ms 192.168.99.20

	# will try for 3s and quit if no reply
	pingdy -t 3s -i 500ms -z 187ms  192.168.99.20
"""

EngineFactory = Callable[[str, RunConfig, PingLogger], Engine]


def create_engine(
    host: str,
    config: RunConfig,
    logger: PingLogger
) -> Engine:
    return Pinger(host, config=config, logger=logger)


def run_pingdy(
    config: RunConfig,
    engine_factory: EngineFactory = create_engine,
    echo: Echo = click.echo,
    logger: PingLogger | None = None,
) -> int:
    """
    Выполнить опрос и вывести отчет. Возвращает код завершения процесса:
    0 - опрос выполнен (в том числе прерван по Ctrl-C),
    1 - цель не найдена или опрос завершился ошибкой.
    """
    if logger is None:
        logger = PingLogger()
        logger.setup()
    try:
        engine = engine_factory(config.host, config, logger)
    except HostResolutionError as err:
        logger.error("host resolution failed: %s", err)
        echo(f"ERROR: {err}")
        return 1

    engine.set_handler(EventReporter(config, echo=echo))

    echo(f"Pingdy -----> {engine.addr} ({engine.ip_addr}):")
    echo(f"To log on threshold : {format_duration(config.threshold)}")

    exit_code = 0
    with InterruptHandler(engine.stop, logger=logger):
        try:
            engine.run()
        except RunError as err:
            echo(f"Failed to ping target host: {err}")
            # Событие завершения не пришло - выводим то, что успели собрать
            print_summary(engine.statistics(), echo)
            exit_code = 1

    echo(format_duration(engine.statistics().max_rtt))
    return exit_code


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.argument('host', required=False)
@click.option(
    '-c', '--count', type=int, default=DEFAULT_COUNT,
    help='Количество запросов, -1 - без ограничения',
    show_default=True
)
@click.option(
    '-i', '--interval', type=DURATION, default=DEFAULT_INTERVAL,
    help='Интервал между запросами (200ms, 1s, ...), по умолчанию 1s',
)
@click.option(
    '-t', '--timeout', type=DURATION, default=DEFAULT_TIMEOUT,
    help='Общая длительность опроса, по умолчанию без ограничения',
)
@click.option(
    '-z', '--threshold', type=DURATION, default=DEFAULT_THRESHOLD,
    help='Порог RTT, выше которого ответ выводится, по умолчанию 1ms',
)
@click.option(
    '-f', '--full', 'full_log', is_flag=True, default=False,
    help='Выводить каждый ответ',
)
@click.option(
    '--privileged', is_flag=True, default=False,
    help='Использовать raw-сокеты (нужны права root)',
)
@click.option(
    '-s', '--size', type=int, default=DEFAULT_SIZE,
    help='Размер полезной нагрузки запроса, байт',
    show_default=True
)
@click.option(
    '-v', '--verbose', is_flag=True, default=False,
    help='Отладочный журнал в stderr',
)
@click.option(
    '--log-file', type=click.Path(dir_okay=False), default=None,
    help='Писать отладочный журнал в файл (к имени добавляется runId)',
)
@click.pass_context
def cli(ctx, host, verbose, log_file, **kwargs):
    '''
    Ping, который выводит только ответы с RTT выше порога.
    '''
    if host is None:
        click.echo(USAGE, nl=False)
        return

    try:
        config = RunConfig(host=host, **kwargs)
    except ValidationError as err:
        raise click.UsageError(str(err), ctx) from err

    logger = PingLogger()
    logger.setup(LoggerConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        use_console=verbose,
        file_name=log_file,
    ))
    ctx.exit(run_pingdy(config, logger=logger))


if __name__ == '__main__':
    cli()
