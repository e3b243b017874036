"""Tests for relcomment.core.result module."""

import pytest

from relcomment.core.result import Err, Ok, Result, collect, is_err, is_ok


class TestOk:
    def test_ok_is_ok(self) -> None:
        result = Ok(42)
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42
        assert Ok(42).unwrap_or(0) == 42

    def test_ok_map(self) -> None:
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_ok_repr(self) -> None:
        assert repr(Ok("v")) == "Ok('v')"

    def test_ok_frozen(self) -> None:
        result = Ok(42)
        with pytest.raises(AttributeError):
            result.value = 0  # type: ignore[misc]


class TestErr:
    def test_err_is_err(self) -> None:
        result = Err("boom")
        assert result.is_err() is True
        assert result.is_ok() is False

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err: boom"):
            Err("boom").unwrap()

    def test_err_unwrap_or(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_err_map_is_noop(self) -> None:
        result = Err("boom")
        assert result.map(lambda x: x * 2) is result


class TestGuards:
    def test_is_ok_and_is_err(self) -> None:
        good: Result[int, str] = Ok(1)
        bad: Result[int, str] = Err("no")
        assert is_ok(good) and not is_err(good)
        assert is_err(bad) and not is_ok(bad)


class TestCollect:
    def test_all_ok_keeps_order(self) -> None:
        assert collect([Ok(1), Ok(2), Ok(3)]) == Ok([1, 2, 3])

    def test_empty(self) -> None:
        assert collect([]) == Ok([])

    def test_returns_first_error(self) -> None:
        assert collect([Ok(1), Err("a"), Err("b")]) == Err("a")

    def test_consumes_everything_before_failing(self) -> None:
        seen: list[int] = []

        def produce():
            for i in range(4):
                seen.append(i)
                yield Err(i) if i == 1 else Ok(i)

        assert collect(produce()) == Err(1)
        assert seen == [0, 1, 2, 3]
