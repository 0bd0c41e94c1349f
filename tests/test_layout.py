"""Grid shape and pane split tests."""

from __future__ import annotations

import unittest

from ils.layout import (
    GridShape,
    clamp_preview_ratio,
    max_columns,
    split_panes,
    square_grid_shape,
)


class SquareGridShapeTests(unittest.TestCase):
    def test_twelve_entries_with_six_columns_prefers_four_by_three(self) -> None:
        self.assertEqual(square_grid_shape(12, 6), GridShape(cols=4, rows=3))

    def test_empty_listing_has_one_column_and_no_rows(self) -> None:
        self.assertEqual(square_grid_shape(0, 6), GridShape(cols=1, rows=0))

    def test_small_counts(self) -> None:
        self.assertEqual(square_grid_shape(1, 6), GridShape(cols=1, rows=1))
        self.assertEqual(square_grid_shape(2, 6), GridShape(cols=2, rows=1))
        self.assertEqual(square_grid_shape(5, 6), GridShape(cols=3, rows=2))
        self.assertEqual(square_grid_shape(9, 6), GridShape(cols=3, rows=3))

    def test_narrow_terminal_caps_columns(self) -> None:
        self.assertEqual(square_grid_shape(9, 2), GridShape(cols=2, rows=5))
        self.assertEqual(square_grid_shape(30, 1), GridShape(cols=1, rows=30))

    def test_chosen_shape_is_as_square_as_allowed(self) -> None:
        for count in range(1, 120):
            for max_cols in range(1, 9):
                with self.subTest(count=count, max_cols=max_cols):
                    shape = square_grid_shape(count, max_cols)
                    self.assertTrue(1 <= shape.cols <= max_cols)
                    self.assertEqual(shape.rows, -(-count // shape.cols))
                    best = min(abs(c - -(-count // c)) for c in range(1, max_cols + 1))
                    self.assertEqual(abs(shape.cols - shape.rows), best)

    def test_shape_is_deterministic(self) -> None:
        self.assertEqual(square_grid_shape(37, 5), square_grid_shape(37, 5))

    def test_position_is_row_major(self) -> None:
        shape = GridShape(cols=4, rows=3)
        self.assertEqual(shape.position(0), (0, 0))
        self.assertEqual(shape.position(5), (1, 1))
        self.assertEqual(shape.position(11), (2, 3))


class MaxColumnsTests(unittest.TestCase):
    def test_columns_follow_cell_width(self) -> None:
        self.assertEqual(max_columns(80), 3)
        self.assertEqual(max_columns(132), 6)
        self.assertEqual(max_columns(10), 1)


class SplitPanesTests(unittest.TestCase):
    def test_hidden_preview_gives_grid_every_body_row(self) -> None:
        geometry = split_panes(24, 0.5, preview_visible=False)
        self.assertEqual(geometry.grid_top, 1)
        self.assertEqual(geometry.grid_rows, 22)
        self.assertIsNone(geometry.separator_row)
        self.assertEqual(geometry.preview_height, 0)
        self.assertEqual(geometry.footer_row, 23)

    def test_visible_preview_splits_body_by_ratio(self) -> None:
        geometry = split_panes(24, 0.5, preview_visible=True)
        self.assertEqual(geometry.grid_rows, 11)
        self.assertEqual(geometry.separator_row, 12)
        self.assertEqual(geometry.preview_top, 13)
        self.assertEqual(geometry.preview_height, 10)
        self.assertEqual(geometry.footer_row, 23)

    def test_tiny_terminal_drops_preview(self) -> None:
        geometry = split_panes(4, 0.5, preview_visible=True)
        self.assertIsNone(geometry.separator_row)
        self.assertEqual(geometry.preview_height, 0)
        self.assertEqual(geometry.grid_rows, 2)

    def test_grid_keeps_at_least_one_row(self) -> None:
        geometry = split_panes(12, 1.0, preview_visible=True)
        self.assertGreaterEqual(geometry.grid_rows, 1)
        self.assertEqual(geometry.grid_rows + geometry.preview_height + 1, 10)

    def test_clamp_preview_ratio(self) -> None:
        self.assertEqual(clamp_preview_ratio(0.0), 0.1)
        self.assertEqual(clamp_preview_ratio(0.95), 0.9)
        self.assertEqual(clamp_preview_ratio(0.4), 0.4)


if __name__ == "__main__":
    unittest.main()
