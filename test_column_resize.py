#!/usr/bin/env python3
"""
Tests for column width redistribution and the drag listener
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from PyQt6.QtCore import QCoreApplication, QEvent, QObject

from filtergrid.widgets.filterable_table.column_resize import (
    ColumnResizer,
    can_resize,
    compute_resize,
    format_px,
    initial_column_widths,
    parse_px,
)
from filtergrid.widgets.filterable_table.table_types import ColumnDefinition

app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])


def make_columns():
    return [
        ColumnDefinition(key='a', label='A'),
        ColumnDefinition(key='b', label='B'),
        ColumnDefinition(key='c', label='C'),
        ColumnDefinition(key='d', label='D', resizable=False),
    ]


class TestComputeResize(unittest.TestCase):

    def test_plain_move(self):
        self.assertEqual(compute_resize(100, 100, 30, 50), (130, 70))

    def test_clamps_right_column(self):
        self.assertEqual(compute_resize(100, 100, 70, 50), (150, 50))

    def test_clamps_left_column(self):
        self.assertEqual(compute_resize(100, 100, -80, 50), (50, 150))

    def test_total_is_conserved(self):
        for delta in (-200, -51, -50, -1, 0, 1, 49, 50, 51, 200):
            left, right = compute_resize(120, 80, delta, 40)
            self.assertEqual(left + right, 200)
            self.assertGreaterEqual(left, 40)
            self.assertGreaterEqual(right, 40)

    def test_px_helpers(self):
        self.assertEqual(format_px(130), '130px')
        self.assertEqual(format_px(130.0), '130px')
        self.assertEqual(format_px(12.5), '12.5px')
        self.assertEqual(parse_px('80px'), 80.0)
        self.assertEqual(parse_px(' 80 '), 80.0)
        self.assertIsNone(parse_px('20%'))
        self.assertIsNone(parse_px(None))


class TestCanResize(unittest.TestCase):

    def test_last_visible_column_has_no_resizer(self):
        columns = make_columns()
        self.assertTrue(can_resize(columns, ['a', 'b', 'c'], 1))
        self.assertFalse(can_resize(columns, ['a', 'b', 'c'], 2))
        self.assertFalse(can_resize(columns, ['a'], 0))

    def test_non_resizable_neighbour(self):
        self.assertFalse(can_resize(make_columns(), ['a', 'b', 'c', 'd'], 2))

    def test_disabled(self):
        self.assertFalse(can_resize(make_columns(), ['a', 'b'], 0, allow_resize=False))

    def test_index_follows_visible_columns(self):
        # With b hidden, index 0 is the a|c border
        columns = make_columns()
        columns[1].resizable = False
        self.assertTrue(can_resize(columns, ['a', 'c'], 0))


class TestColumnResizer(unittest.TestCase):

    def setUp(self):
        self.resizer = ColumnResizer(min_width=50)
        self.emitted = []
        self.finished = []
        self.resizer.column_resized.connect(lambda key, width: self.emitted.append((key, width)))
        self.resizer.resize_finished.connect(self.finished.append)
        self.widths = {'a': 100, 'b': 100, 'c': 200}

    def tearDown(self):
        self.resizer.dispose()

    def test_begin_rebaselines_every_visible_column(self):
        started = self.resizer.begin(make_columns(), ['a', 'b', 'c'], 0, 10, self.widths)
        self.assertTrue(started)
        self.assertEqual(self.emitted, [('a', '100px'), ('b', '100px'), ('c', '200px')])
        self.assertEqual(self.resizer.resizing_column, 'a')

    def test_drag_publishes_both_widths(self):
        self.resizer.begin(make_columns(), ['a', 'b', 'c'], 0, 10, self.widths)
        self.emitted.clear()

        self.assertEqual(self.resizer.move(40), ('130px', '70px'))
        self.assertEqual(self.emitted, [('a', '130px'), ('b', '70px')])

        self.assertEqual(self.resizer.move(80), ('150px', '50px'))
        self.resizer.end()
        self.assertFalse(self.resizer.is_active())
        self.assertEqual(self.finished, ['a'])
        self.assertIsNone(self.resizer.move(100))

    def test_second_drag_is_ignored_while_active(self):
        self.resizer.begin(make_columns(), ['a', 'b', 'c'], 0, 0, self.widths)
        self.assertFalse(self.resizer.begin(make_columns(), ['a', 'b', 'c'], 1, 0, self.widths))
        self.assertEqual(self.resizer.resizing_column, 'a')

    def test_column_min_width_overrides_default(self):
        columns = make_columns()
        columns[0].min_width = '80px'
        self.resizer.begin(columns, ['a', 'b', 'c'], 0, 0, self.widths)
        self.assertEqual(self.resizer.move(-60), ('80px', '120px'))

    def test_missing_rendered_width(self):
        self.assertFalse(self.resizer.begin(make_columns(), ['a', 'b'], 0, 0, {'a': 100}))
        self.assertEqual(self.emitted, [])

    def test_release_removes_event_filter(self):
        watched = QObject()
        self.resizer.begin(make_columns(), ['a', 'b', 'c'], 0, 0, self.widths, watched=watched)
        self.assertTrue(self.resizer.is_listening())

        QCoreApplication.sendEvent(watched, QEvent(QEvent.Type.MouseButtonRelease))

        self.assertFalse(self.resizer.is_active())
        self.assertFalse(self.resizer.is_listening())
        self.assertEqual(self.finished, ['a'])

    def test_dispose_mid_drag_stops_listening(self):
        watched = QObject()
        self.resizer.begin(make_columns(), ['a', 'b', 'c'], 1, 0, self.widths, watched=watched)
        self.resizer.dispose()
        self.assertFalse(self.resizer.is_listening())
        self.assertFalse(self.resizer.is_active())


class TestInitialWidths(unittest.TestCase):

    def test_even_share(self):
        columns = [ColumnDefinition(key=k, label=k) for k in 'abc']
        self.assertEqual(initial_column_widths(columns), {'a': '33%', 'b': '33%', 'c': '33%'})

    def test_explicit_width_wins(self):
        columns = [ColumnDefinition(key='a', label='A', width='120px'), ColumnDefinition(key='b', label='B')]
        self.assertEqual(initial_column_widths(columns), {'a': '120px', 'b': '50%'})

    def test_no_columns(self):
        self.assertEqual(initial_column_widths([]), {})


if __name__ == '__main__':
    unittest.main()
