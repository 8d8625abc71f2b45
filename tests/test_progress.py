from types import SimpleNamespace

import pytest

from models import Status
from services.progress import days_to_finish, derive_status, percent_complete


def _book(total: int, current: int) -> SimpleNamespace:
    return SimpleNamespace(total_pages=total, current_page=current)


def test_percent_complete_unknown_length_is_zero() -> None:
    assert percent_complete(_book(0, 0)) == 0.0
    assert percent_complete(_book(0, 25)) == 0.0


def test_percent_complete_ratio() -> None:
    assert percent_complete(_book(100, 30)) == pytest.approx(30.0)
    assert percent_complete(_book(3, 1)) == pytest.approx(33.333, rel=1e-3)


def test_percent_complete_bounds() -> None:
    total = 37
    for current in range(total + 1):
        pct = percent_complete(_book(total, current))
        assert 0.0 <= pct <= 100.0
        assert (pct == 100.0) == (current == total)


def test_days_to_finish() -> None:
    assert days_to_finish(_book(100, 30), 7) == 10
    assert days_to_finish(_book(100, 29), 7) == 11
    assert days_to_finish(_book(100, 99), 50) == 1


@pytest.mark.parametrize("rate", [0, -1, -20])
def test_days_to_finish_without_rate(rate: int) -> None:
    assert days_to_finish(_book(100, 30), rate) is None


def test_days_to_finish_when_done_or_unknown() -> None:
    assert days_to_finish(_book(100, 100), 10) is None
    assert days_to_finish(_book(0, 0), 10) is None


def test_derive_status() -> None:
    assert derive_status(100, 0) is Status.TO_READ
    assert derive_status(100, 1) is Status.READING
    assert derive_status(100, 100) is Status.FINISHED
    # unknown length never derives Finished
    assert derive_status(0, 40) is Status.READING
    assert derive_status(0, 0) is Status.TO_READ


@pytest.mark.parametrize(
    "text, expected",
    [
        ("to-read", Status.TO_READ),
        ("ToRead", Status.TO_READ),
        ("todo", Status.TO_READ),
        ("0", Status.TO_READ),
        ("Reading", Status.READING),
        ("1", Status.READING),
        ("finished", Status.FINISHED),
        (" DONE ", Status.FINISHED),
        ("2", Status.FINISHED),
        ("paused", None),
        ("", None),
    ],
)
def test_status_parse(text: str, expected) -> None:
    assert Status.parse(text) is expected


def test_status_labels() -> None:
    assert [s.label for s in Status] == ["To-Read", "Reading", "Finished"]
