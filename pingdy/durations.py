import re

import click


# Множители единиц в наносекундах. Набор суффиксов совпадает с тем, что
# понимает time.ParseDuration в Go, чтобы старые команды работали как есть.
UNITS = {
    'ns': 1,
    'us': 1_000,
    'µs': 1_000,  # U+00B5
    'μs': 1_000,  # U+03BC
    'ms': 1_000_000,
    's': 1_000_000_000,
    'm': 60 * 1_000_000_000,
    'h': 3600 * 1_000_000_000,
}

_TOKEN = re.compile(r'(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)')


def parse_duration(text: str) -> float:
    """
    Разобрать строку вида "200ms", "0.890ms", "1h30m" и вернуть секунды.

    Raises:
        ValueError: если строка не является корректной длительностью
    """
    s = text.strip()
    sign = 1
    if s[:1] in ('+', '-'):
        sign = -1 if s[0] == '-' else 1
        s = s[1:]
    if s == '0':
        return 0.0
    if not s:
        raise ValueError(f'invalid duration "{text}"')

    total_ns = 0.0
    pos = 0
    while pos < len(s):
        match = _TOKEN.match(s, pos)
        if match is None:
            raise ValueError(f'invalid duration "{text}"')
        number, unit = match.groups()
        total_ns += float(number) * UNITS[unit]
        pos = match.end()
    return sign * total_ns / 1e9


def _fraction(value: int, unit: int) -> str:
    """Целая часть и дробная без хвостовых нулей: 1_500_000 / 10**6 -> 1.5"""
    whole, frac = divmod(value, unit)
    if frac == 0:
        return str(whole)
    digits = len(str(unit)) - 1
    return f'{whole}.' + str(frac).rjust(digits, '0').rstrip('0')


def format_duration(seconds: float) -> str:
    """
    Вывести длительность так же, как это делает Duration.String() в Go:
    "150ms", "1.234567ms", "890µs", "1.5s", "1m30s", "0s".
    """
    ns = round(seconds * 1e9)
    if ns == 0:
        return '0s'
    sign = '-' if ns < 0 else ''
    ns = abs(ns)

    if ns < 1_000:
        return f'{sign}{ns}ns'
    if ns < 1_000_000:
        return f'{sign}{_fraction(ns, 1_000)}µs'
    if ns < 1_000_000_000:
        return f'{sign}{_fraction(ns, 1_000_000)}ms'

    hours, rest = divmod(ns, UNITS['h'])
    minutes, rest = divmod(rest, UNITS['m'])
    secs = _fraction(rest, UNITS['s']) + 's'
    if hours:
        return f'{sign}{hours}h{minutes}m{secs}'
    if minutes:
        return f'{sign}{minutes}m{secs}'
    return f'{sign}{secs}'


def format_float(value: float) -> str:
    """Кратчайшее представление числа, как %v в Go: 0, 20, 33.333333333333336"""
    text = repr(float(value))
    return text[:-2] if text.endswith('.0') else text


class Duration(click.ParamType):
    """Тип параметра click для длительностей в формате Go."""
    name = 'duration'

    def convert(self, value, param, ctx):
        if isinstance(value, (int, float)):
            return float(value)
        try:
            return parse_duration(value)
        except ValueError as err:
            self.fail(str(err), param, ctx)


DURATION = Duration()
