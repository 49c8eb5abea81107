import pytest

from cat import Buffer, Config, NumberMode, append_with_flags


def transform(data, **options):
    out = Buffer()
    append_with_flags(out, Config(**options), data)
    return out.getvalue()


def test_plain_copy():
    assert transform(b'a\nb\n') == b'a\nb\n'


def test_squeeze():
    assert transform(b'a\n\n\nb\n', squeeze_blank=True) == b'a\n\nb\n'


def test_number_all():
    assert transform(b'a\nb\n', number=NumberMode.ALL) == b'1\ta\n2\tb\n'


def test_number_nonblank():
    assert transform(b'\na\n', number=NumberMode.NONBLANK) == b'\n1\ta\n'


def test_show_ends():
    assert transform(b'a\n', show_ends=True) == b'a$\n'


def test_empty_source():
    assert transform(b'', number=NumberMode.ALL, show_ends=True) == b''


@pytest.mark.parametrize('k', [1, 2, 3, 7])
def test_squeeze_collapses_any_run(k):
    data = b'a\n' + b'\n' * k + b'b\n'
    assert transform(data, squeeze_blank=True) == b'a\n\nb\n'
    assert transform(data) == data


def test_squeeze_leading_and_trailing_runs():
    assert transform(b'\n\n\na\n', squeeze_blank=True) == b'\na\n'
    assert transform(b'a\n\n\n', squeeze_blank=True) == b'a\n\n'
    assert transform(b'\n\n\n', squeeze_blank=True) == b'\n'


def test_number_all_counts_squeezed_lines():
    data = b'x\n\ny\n\n\nz\n'
    assert transform(data, number=NumberMode.ALL, squeeze_blank=True) == \
        b'1\tx\n2\t\n3\ty\n4\t\n5\tz\n'


def test_number_nonblank_skips_blank_lines():
    data = b'x\n\ny\n\n\nz\n'
    assert transform(data, number=NumberMode.NONBLANK) == \
        b'1\tx\n\n2\ty\n\n\n3\tz\n'


def test_number_and_show_ends():
    assert transform(b'a\n\n', number=NumberMode.ALL, show_ends=True) == b'1\ta$\n2\t$\n'


def test_numbers_are_left_aligned_without_padding():
    data = b''.join(b'%d\n' % i for i in range(12))
    lines = transform(data, number=NumberMode.ALL).split(b'\n')
    assert lines[0] == b'1\t0'
    assert lines[9] == b'10\t9'
    assert lines[11] == b'12\t11'


def test_unterminated_last_line():
    assert transform(b'a\nb') == b'a\nb'
    assert transform(b'a\nb', number=NumberMode.ALL, show_ends=True) == b'1\ta$\n2\tb'
    assert transform(b'x', number=NumberMode.NONBLANK) == b'1\tx'


def test_numbering_continues_across_sources():
    out = Buffer()
    config = Config(number=NumberMode.ALL)
    append_with_flags(out, config, b'a\nb\n')
    append_with_flags(out, config, b'c\n')
    assert out.getvalue() == b'1\ta\n2\tb\n3\tc\n'
    assert out.line_count == 3


def test_squeeze_is_per_source():
    out = Buffer()
    config = Config(squeeze_blank=True)
    append_with_flags(out, config, b'a\n\n')
    append_with_flags(out, config, b'\nb\n')
    assert out.getvalue() == b'a\n\n\nb\n'


def test_numbered_line_count_matches_predicate():
    data = b'one\n\ntwo\n\n\n\nthree\nfour\n'
    out = transform(data, number=NumberMode.NONBLANK, squeeze_blank=True)
    numbered = [line for line in out.split(b'\n') if b'\t' in line]
    assert len(numbered) == 4


def test_output_grows_past_initial_capacity():
    data = b'line\n' * 10000
    out = transform(data, number=NumberMode.ALL)
    assert out.count(b'\n') == 10000
    assert out.endswith(b'10000\tline\n')
