import pytest

from archiver.validation.frame_rate import matches_any, parse_frame_rate


class TestParseFrameRate:
    def test_ntsc_fraction(self) -> None:
        assert parse_frame_rate("24000/1001") == pytest.approx(23.976, abs=1e-3)

    def test_integer_fraction(self) -> None:
        assert parse_frame_rate("25/1") == 25.0

    def test_plain_number_string(self) -> None:
        assert parse_frame_rate("29.97") == pytest.approx(29.97)

    def test_numeric(self) -> None:
        assert parse_frame_rate(30) == 30.0

    @pytest.mark.parametrize("value", ["", "  ", "abc", "1/0", "0/0", "x/1", None, True, [24]])
    def test_invalid(self, value: object) -> None:
        assert parse_frame_rate(value) is None


class TestMatchesAny:
    def test_within_tolerance(self) -> None:
        assert matches_any(23.976, (23.98, 24.0), 0.1) is True

    def test_outside_tolerance(self) -> None:
        assert matches_any(25.0, (23.98, 24.0, 29.97, 30.0), 0.1) is False

    def test_tolerance_is_exclusive(self) -> None:
        assert matches_any(24.5, (24.0,), 0.5) is False

    def test_empty_accepted_set(self) -> None:
        assert matches_any(24.0, (), 0.1) is False
