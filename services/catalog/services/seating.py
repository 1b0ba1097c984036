"""Geometría de asientos: etiquetas `<fila>-<columna>` y bandas de capacidad por fila"""
import re
from typing import Dict, List, Tuple

from shared.utils.errors import BadRequest, InvalidSeatFormat, SeatOutOfRange

SEAT_LABEL_RE = re.compile(r"^([A-Z])-(\d+)$")
MAX_ROWS = 26  # Filas A-Z


def row_letter(index: int) -> str:
    return chr(ord("A") + index)


def row_index(letter: str) -> int:
    return ord(letter) - ord("A")


def parse_seat_label(seat_label: str) -> Tuple[str, int]:
    """
    Separar una etiqueta de asiento en (fila, columna)

    La columna debe estar en forma canónica ("A-01" no es válido) para que
    cada asiento físico tenga una sola etiqueta en el constraint único.
    """
    match = SEAT_LABEL_RE.match(seat_label or "")
    if not match:
        raise InvalidSeatFormat()

    row, col_str = match.groups()
    col = int(col_str)
    if str(col) != col_str:
        raise InvalidSeatFormat()
    return row, col


def max_seats_for_row(seat_bands: List[Dict], row: str) -> int:
    """Capacidad máxima de la fila según las bandas de la función (0 si ninguna la cubre)"""
    for band in seat_bands:
        if band["from_row"] <= row <= band["to_row"]:
            return int(band["max_seats"])
    return 0


def check_seat_in_range(rows: int, seat_bands: List[Dict], seat_label: str) -> Tuple[str, int]:
    """
    Validar formato y rango de un asiento para la geometría de una función

    Raises:
        InvalidSeatFormat: la etiqueta no sigue la gramática
        SeatOutOfRange: fila o columna fuera de la sala
    """
    row, col = parse_seat_label(seat_label)

    if row_index(row) >= rows:
        raise SeatOutOfRange(f"La fila {row} está fuera del rango de la sala")

    max_seats = max_seats_for_row(seat_bands, row)
    if col < 1 or col > max_seats:
        raise SeatOutOfRange(
            f"Asiento fuera de rango para la fila {row}. El máximo es {max_seats}."
        )
    return row, col


def validate_seat_bands(rows: int, seat_bands: List[Dict]) -> None:
    """
    Validar que las bandas cubran las filas A..N de forma contigua, sin huecos
    ni solapamientos, y con capacidad positiva.
    """
    if rows < 1 or rows > MAX_ROWS:
        raise BadRequest(f"rows debe estar entre 1 y {MAX_ROWS}")
    if not seat_bands:
        raise BadRequest("Se requiere al menos una banda de asientos")

    expected = 0
    for band in seat_bands:
        start, end = band["from_row"], band["to_row"]
        if row_index(start) != expected or end < start:
            raise BadRequest(f"Banda {start}-{end} no es contigua a la anterior")
        if int(band["max_seats"]) < 1:
            raise BadRequest(f"Banda {start}-{end} debe tener al menos un asiento")
        expected = row_index(end) + 1

    if expected != rows:
        raise BadRequest(
            f"Las bandas cubren {expected} filas pero la función tiene {rows}"
        )
