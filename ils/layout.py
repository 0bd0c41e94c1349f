"""Grid and pane geometry.

``square_grid_shape`` picks the column count that makes the entry grid as
close to square as the terminal width allows. ``split_panes`` divides the
screen rows between header, grid, optional preview, and footer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

NAME_WIDTH = 20
CELL_WIDTH = NAME_WIDTH + 2
HEADER_ROWS = 1
FOOTER_ROWS = 1
MIN_PREVIEW_RATIO = 0.1
MAX_PREVIEW_RATIO = 0.9
DEFAULT_PREVIEW_RATIO = 0.5


@dataclass(frozen=True)
class GridShape:
    cols: int
    rows: int

    def position(self, index: int) -> tuple[int, int]:
        """Return ``(row, col)`` of ``index`` in row-major order."""
        return divmod(index, self.cols)


@dataclass(frozen=True)
class PaneGeometry:
    """Screen rows assigned to each region; all row numbers are 0-based."""

    grid_top: int
    grid_rows: int
    separator_row: int | None
    preview_top: int
    preview_height: int
    footer_row: int


def max_columns(width: int, cell_width: int = CELL_WIDTH) -> int:
    return max(1, width // cell_width)


def _candidates(ideal: int, max_cols: int):
    """Yield column counts ordered by distance from ``ideal``, smaller first on ties."""
    yield ideal
    for distance in range(1, max_cols):
        for cols in (ideal - distance, ideal + distance):
            if 1 <= cols <= max_cols:
                yield cols


def square_grid_shape(count: int, max_cols: int) -> GridShape:
    """Choose ``(cols, rows)`` for ``count`` entries with at most ``max_cols`` columns.

    The score of a candidate is ``|cols - rows|``. Candidates are scanned
    outward from ``ceil(sqrt(count))`` and the first one reaching the lowest
    score wins, so ties resolve to the column count nearest the square root
    (the smaller one when two are equally near). Twelve entries with six
    columns available give 4x3 rather than 3x4 or 6x2.
    """
    max_cols = max(1, max_cols)
    if count <= 0:
        return GridShape(cols=1, rows=0)

    ideal = min(max(1, math.ceil(math.sqrt(count))), max_cols)
    best_cols = ideal
    best_score: int | None = None
    for cols in _candidates(ideal, max_cols):
        rows = -(-count // cols)
        score = abs(cols - rows)
        if best_score is None or score < best_score:
            best_cols, best_score = cols, score
    return GridShape(cols=best_cols, rows=-(-count // best_cols))


def clamp_preview_ratio(ratio: float) -> float:
    return min(MAX_PREVIEW_RATIO, max(MIN_PREVIEW_RATIO, ratio))


def split_panes(height: int, ratio: float, preview_visible: bool) -> PaneGeometry:
    """Assign terminal rows to the grid and, when visible, the preview pane.

    The preview block takes ``ratio`` of the rows between header and footer;
    its first row is the separator line.
    """
    body = max(0, height - HEADER_ROWS - FOOTER_ROWS)
    footer_row = max(0, height - FOOTER_ROWS)
    if not preview_visible or body < 3:
        return PaneGeometry(
            grid_top=HEADER_ROWS,
            grid_rows=max(1, body),
            separator_row=None,
            preview_top=footer_row,
            preview_height=0,
            footer_row=footer_row,
        )

    preview_block = int(body * clamp_preview_ratio(ratio))
    preview_block = min(body - 1, max(2, preview_block))
    grid_rows = body - preview_block
    separator_row = HEADER_ROWS + grid_rows
    return PaneGeometry(
        grid_top=HEADER_ROWS,
        grid_rows=grid_rows,
        separator_row=separator_row,
        preview_top=separator_row + 1,
        preview_height=preview_block - 1,
        footer_row=footer_row,
    )
