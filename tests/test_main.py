from click.testing import CliRunner

from pingdy import main
from pingdy.config import RunConfig
from pingdy.main import USAGE, cli, run_pingdy

from conftest import make_packet


def test_no_host_prints_usage(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError('engine must not be created')

    monkeypatch.setattr(main, 'create_engine', fail)
    result = CliRunner().invoke(cli, [])

    assert 0 == result.exit_code
    assert USAGE == result.output


def test_flags_are_passed_to_config(monkeypatch):
    configs = []

    def fake_run(config, **kwargs):
        configs.append(config)
        return 0

    monkeypatch.setattr(main, 'run_pingdy', fake_run)
    result = CliRunner().invoke(cli, [
        '-c', '5', '-i', '200ms', '-t', '3s', '-z', '0.890ms', '-f',
        '--privileged', '192.168.99.20'
    ])

    assert 0 == result.exit_code, result.output
    config = configs[0]
    assert '192.168.99.20' == config.host
    assert 5 == config.count
    assert 0.2 == config.interval
    assert 3.0 == config.timeout
    assert abs(config.threshold - 0.00089) < 1e-12
    assert config.full_log
    assert config.privileged


def test_bad_duration_is_usage_error():
    result = CliRunner().invoke(cli, ['-z', '100', 'example.com'])
    assert 2 == result.exit_code
    assert 'invalid duration' in result.output


def test_bad_interval_is_usage_error():
    result = CliRunner().invoke(cli, ['-i', '0s', 'example.com'])
    assert 2 == result.exit_code


def test_cli_exit_code_follows_run(monkeypatch):
    monkeypatch.setattr(main, 'run_pingdy', lambda config, **kwargs: 1)
    result = CliRunner().invoke(cli, ['example.com'])
    assert 1 == result.exit_code


def test_run_prints_threshold_lines_and_summary(engine_factory):
    engine_factory.script = [
        ('recv', make_packet(seq=0, rtt=0.15)),
        ('recv', make_packet(seq=1, rtt=0.05)),
        ('dup', make_packet(seq=1, rtt=0.06)),
    ]
    lines = []
    config = RunConfig(host='example.com', threshold=0.1, count=2)
    code = run_pingdy(config, engine_factory=engine_factory,
                      echo=lines.append)

    assert 0 == code
    assert 'Pingdy -----> example.com (10.0.0.1):' == lines[0]
    assert 'To log on threshold : 100ms' == lines[1]
    assert 'icmp_seq=0 rtt=150ms' in lines[2]
    assert lines[3].endswith('icmp_seq=1 time=60ms ttl=57 (DUP!)')
    assert '\n--- example.com ping statistics ---' == lines[4]
    assert lines[5].startswith('2 packets transmitted, 2 packets received, '
                               '1 duplicates')
    assert '150ms' == lines[-1]
    assert not any('icmp_seq=1 rtt=' in line for line in lines)


def test_run_host_resolution_error(engine_factory):
    lines = []
    config = RunConfig(host='unknown.invalid')
    code = run_pingdy(config, engine_factory=engine_factory,
                      echo=lines.append)

    assert 1 == code
    assert ['ERROR: cannot resolve host "unknown.invalid"'] == lines
    assert [] == engine_factory.engines


def test_run_error_prints_partial_statistics(engine_factory):
    engine_factory.script = [('recv', make_packet(seq=0, rtt=0.002))]
    engine_factory.fail_with = 'socket permission denied'
    lines = []
    config = RunConfig(host='example.com', privileged=True)
    code = run_pingdy(config, engine_factory=engine_factory,
                      echo=lines.append)

    assert 1 == code
    assert 'Failed to ping target host: socket permission denied' in lines
    assert '\n--- example.com ping statistics ---' in lines
    assert any(line.startswith('1 packets transmitted, 1 packets received')
               for line in lines)
    assert '2ms' == lines[-1]


def test_run_full_log(engine_factory):
    engine_factory.script = [
        ('recv', make_packet(seq=seq, rtt=0.0005)) for seq in range(3)]
    lines = []
    config = RunConfig(host='example.com', full_log=True)
    run_pingdy(config, engine_factory=engine_factory, echo=lines.append)

    full = [line for line in lines if ' time=500µs ' in line]
    assert 3 == len(full)


def test_too_large_size_is_usage_error():
    result = CliRunner().invoke(cli, ['-s', '2000', 'example.com'])
    assert 2 == result.exit_code
