import logging
import re

from backend.config import DEFAULT_COLUMNS

logger = logging.getLogger(__name__)

_LAYOUT_RE = re.compile(r"^\s*(\d+)\s*[xX×]\s*(\d+)\s*$")


def parse_layout(descriptor):
    """Split a "rows x columns" descriptor into two ints.

    Anything unparseable yields (0, DEFAULT_COLUMNS) so placement can still
    number seats row by row.
    """
    match = _LAYOUT_RE.match(str(descriptor or ""))
    if match:
        rows, columns = int(match.group(1)), int(match.group(2))
        if rows > 0 and columns > 0:
            return rows, columns

    logger.debug("Unparseable seat matrix %r, using %d columns", descriptor, DEFAULT_COLUMNS)
    return 0, DEFAULT_COLUMNS


def seat_position(seat_no, columns):
    row = (seat_no - 1) // columns + 1
    column = (seat_no - 1) % columns + 1
    return row, column


def generate_layout(assignments, layout):
    rows, columns = parse_layout(layout)
    if rows == 0:
        rows = max((a.row for a in assignments), default=0)

    grid = [["Empty"] * columns for _ in range(rows)]

    for a in assignments:
        if 1 <= a.row <= rows and 1 <= a.column <= columns:
            grid[a.row - 1][a.column - 1] = f"{a.examinee_id} - {a.examinee_name}"

    return grid
