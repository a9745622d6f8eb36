"""Tests for test-plan fingerprints."""

import pytest
from hypothesis import given, strategies as st

from jmxroundtrip.exceptions import FixtureAccessError
from jmxroundtrip.stats import (
    NO_STATS,
    FileStats,
    compute_stats,
    get_buffer_stats,
    get_file_stats,
)

line_text = st.text(alphabet=st.characters(exclude_characters="\r\n"), max_size=40)


def test_root_element_line_is_counted_but_not_sized(tmp_path):
    path = tmp_path / "plan.jmx"
    path.write_bytes(b'<jmeterTestPlan version="1">\nfoo\nbar\n')

    assert get_file_stats(path) == FileStats(6, 3)


def test_empty_file_has_zero_stats(tmp_path):
    path = tmp_path / "empty.jmx"
    path.write_bytes(b"")

    assert get_file_stats(path) == FileStats(0, 0)


def test_missing_file_returns_sentinel(tmp_path):
    assert get_file_stats(tmp_path / "nope.jmx") is NO_STATS
    assert get_file_stats(None) is NO_STATS


def test_final_line_without_terminator_is_counted(tmp_path):
    path = tmp_path / "plan.jmx"
    path.write_bytes(b"ab\ncd")

    assert get_file_stats(path) == FileStats(4, 2)


@pytest.mark.parametrize("eol", [b"\n", b"\r\n", b"\r"])
def test_line_terminators_are_not_sized(eol):
    data = eol.join([b"<jmeterTestPlan>", b"abc", b"de"]) + eol

    assert get_buffer_stats(data) == FileStats(5, 3)


def test_exempt_prefix_is_an_exact_prefix():
    stats = compute_stats([" <jmeterTestPlan>", "<jmeterTestPlanX>", "<jmeter"])

    # leading whitespace defeats the match; a longer tag name still matches
    assert stats == FileStats(len(" <jmeterTestPlan>") + len("<jmeter"), 3)


def test_custom_exempt_prefix():
    assert compute_stats(["<root a='1'>", "xy"], exempt_prefix="<root") == FileStats(2, 2)


def test_unreadable_encoding_raises_fixture_access_error(tmp_path):
    path = tmp_path / "latin.jmx"
    path.write_bytes(b"caf\xe9\n")

    with pytest.raises(FixtureAccessError) as exc_info:
        get_file_stats(path, encoding="utf-8")
    assert exc_info.value.error_code == "FIXTURE_001"


def test_sentinel_never_matches():
    assert not NO_STATS.same_size(FileStats(0, 0))
    assert not NO_STATS.same_size(NO_STATS)
    assert not NO_STATS.same_line_count(NO_STATS)
    assert not FileStats(0, 0).same_size(NO_STATS)
    assert not FileStats(3, 1).same_line_count(None)
    assert not FileStats(3, 1).same_size(None)


def test_present_stats_compare_fieldwise():
    assert FileStats(6, 3).same_size(FileStats(6, 4))
    assert not FileStats(6, 3).same_line_count(FileStats(6, 4))
    assert FileStats(6, 3).same_line_count(FileStats(7, 3))


@pytest.mark.parametrize("size,lines", [(-1, 0), (0, -1), (-2, -2), (5, -1)])
def test_mixed_absent_fields_are_rejected(size, lines):
    with pytest.raises(ValueError):
        FileStats(size, lines)


def test_str_describes_stats():
    assert str(FileStats(6, 3)) == "6 chars / 3 lines"
    assert str(NO_STATS) == "<no stats>"


@given(body=st.lists(line_text, max_size=20), attrs=line_text)
def test_root_line_contents_never_change_size(body, attrs):
    with_root = [f"<jmeterTestPlan {attrs}>", *body]
    plain = ["<jmeterTestPlan>", *body]

    assert compute_stats(with_root) == compute_stats(plain)


@given(lines=st.lists(line_text, max_size=20))
def test_buffer_and_line_stats_agree(lines):
    data = "".join(f"{line}\n" for line in lines).encode("utf-8")

    assert get_buffer_stats(data) == compute_stats(lines)


def test_invalid_bytes_in_buffer_are_replaced():
    assert get_buffer_stats(b"<jmeterTestPlan>\ncaf\xe9\n") == FileStats(4, 2)
