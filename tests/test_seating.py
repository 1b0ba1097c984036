import pytest

from shared.utils.errors import BadRequest, InvalidSeatFormat, SeatOutOfRange
from services.catalog.services.seating import (
    parse_seat_label,
    max_seats_for_row,
    check_seat_in_range,
    validate_seat_bands
)

BANDS = [
    {"from_row": "A", "to_row": "L", "max_seats": 38},
    {"from_row": "M", "to_row": "R", "max_seats": 34},
]


def test_parse_seat_label():
    assert parse_seat_label("A-1") == ("A", 1)
    assert parse_seat_label("R-34") == ("R", 34)


@pytest.mark.parametrize("label", ["a-1", "A1", "A-", "-1", "AA-1", "A-01", "A-1 ", "", None])
def test_parse_seat_label_rejects_bad_grammar(label):
    with pytest.raises(InvalidSeatFormat):
        parse_seat_label(label)


def test_max_seats_per_band():
    assert max_seats_for_row(BANDS, "A") == 38
    assert max_seats_for_row(BANDS, "L") == 38
    assert max_seats_for_row(BANDS, "M") == 34
    assert max_seats_for_row(BANDS, "Z") == 0


def test_check_seat_in_range_band_edges():
    assert check_seat_in_range(18, BANDS, "L-38") == ("L", 38)
    assert check_seat_in_range(18, BANDS, "M-34") == ("M", 34)

    for label in ("L-39", "M-35", "M-40", "A-0", "S-1"):
        with pytest.raises(SeatOutOfRange):
            check_seat_in_range(18, BANDS, label)


def test_row_beyond_show_rows_is_out_of_range():
    # La banda cubre M-R pero la función sólo tiene 13 filas (A-M)
    bands = [{"from_row": "A", "to_row": "M", "max_seats": 10}]
    check_seat_in_range(13, bands, "M-1")
    with pytest.raises(SeatOutOfRange):
        check_seat_in_range(12, BANDS, "M-1")


def test_validate_seat_bands():
    validate_seat_bands(18, BANDS)

    with pytest.raises(BadRequest):
        validate_seat_bands(18, [])
    with pytest.raises(BadRequest):
        # Hueco entre L y N
        validate_seat_bands(18, [BANDS[0], {"from_row": "N", "to_row": "R", "max_seats": 34}])
    with pytest.raises(BadRequest):
        # Las bandas no cubren todas las filas
        validate_seat_bands(20, BANDS)
    with pytest.raises(BadRequest):
        validate_seat_bands(27, BANDS)
