import pytest

from gitproc.utils import KIB, MIB, WriteOnceCell, format_magnitude, parse_magnitude


class TestWriteOnceCell:
    def test_starts_unset(self) -> None:
        cell: WriteOnceCell[int] = WriteOnceCell()

        assert not cell.is_set
        assert cell.get() is None
        assert repr(cell) == "WriteOnceCell(<unset>)"

    def test_first_writer_wins(self) -> None:
        cell: WriteOnceCell[str] = WriteOnceCell()

        assert cell.set("first")
        assert not cell.set("second")
        assert cell.is_set
        assert cell.get() == "first"
        assert repr(cell) == "WriteOnceCell('first')"


class TestParseMagnitude:
    @pytest.mark.parametrize(
        ("value", "unit", "expected"),
        [
            ("250", "bytes", 250),
            ("1", "byte", 1),
            ("1.00", "KiB", KIB),
            ("5.68", "MiB", int(5.68 * MIB)),
            ("2", "gib", 2 * 1024**3),
            ("1", "TiB", 1024**4),
            ("12", "furlongs", 12),
        ],
    )
    def test_converts_units(self, value: str, unit: str, expected: int) -> None:
        assert parse_magnitude(value, unit) == expected

    @pytest.mark.parametrize("value", ["", ".", "1.2.3", "nan", "inf"])
    def test_invalid_value_is_zero(self, value: str) -> None:
        assert parse_magnitude(value, "MiB") == 0


class TestFormatMagnitude:
    @pytest.mark.parametrize(
        ("count", "expected"),
        [
            (0, "0 bytes"),
            (1, "1 byte"),
            (1023, "1023 bytes"),
            (KIB, "1.00 KiB"),
            (int(5.68 * MIB), "5.68 MiB"),
            (3 * 1024**3, "3.00 GiB"),
        ],
    )
    def test_formats(self, count: int, expected: str) -> None:
        assert format_magnitude(count) == expected
