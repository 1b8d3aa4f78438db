import logging

import colorama

from pingdy.logger import ColoredFormatter, LoggerConfig, PingLogger


def test_build_file_name():
    assert "pingdy_123.log" == PingLogger.build_file_name("pingdy.log", 123)
    assert "pingdy_123" == PingLogger.build_file_name("pingdy", 123)
    assert "pingdy.txt-7" == PingLogger.build_file_name(
        "pingdy.txt", 7, sep="-")


def test_file_log_contains_run_fields(tmp_path):
    logger = PingLogger('pingdy-test', time_getter=lambda: 1.5, run_id=42)
    logger.setup(LoggerConfig(file_name=str(tmp_path / "run.log")))
    logger.debug("sent icmp_seq=%d", 3)
    logging.getLogger('pingdy-test').handlers[0].flush()

    text = (tmp_path / "run_42.log").read_text()
    assert "000001.500000" in text
    assert "(R:42)" in text
    assert "sent icmp_seq=3" in text
    assert "test_logger.py" in text


def test_setup_is_called_once():
    logger = PingLogger('pingdy-once')
    logger.setup(LoggerConfig(use_console=True))
    logger.setup(LoggerConfig())
    assert 1 == len(logging.getLogger('pingdy-once').handlers)
    assert isinstance(
        logging.getLogger('pingdy-once').handlers[0], logging.StreamHandler)

    logger.setup(LoggerConfig(), force_run=True)
    handlers = logging.getLogger('pingdy-once').handlers
    assert [logging.NullHandler] == [type(h) for h in handlers]


def test_console_output_is_colored_by_level():
    logger = PingLogger('pingdy-color', run_id=7)
    logger.setup(LoggerConfig(use_console=True))
    handler = logging.getLogger('pingdy-color').handlers[0]
    assert isinstance(handler.formatter, ColoredFormatter)

    record = logging.LogRecord(
        'pingdy-color', logging.WARNING, __file__, 1, 'late reply', (), None)
    record.runTime = 0.25
    record.runId = 7
    text = handler.formatter.format(record)

    assert text.startswith(colorama.Fore.YELLOW)
    assert text.endswith(colorama.Style.RESET_ALL)
    assert 'late reply' in text
