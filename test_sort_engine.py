#!/usr/bin/env python3
"""
Tests for row sorting and the header click cycle
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from filtergrid.widgets.filterable_table.sort_engine import (
    compare_values,
    next_sort_state,
    raw_value,
    sort_rows,
    sort_state_from,
)
from filtergrid.widgets.filterable_table.table_types import SortDirection, SortState


class TestSortRows(unittest.TestCase):

    def test_numeric_ascending_and_descending(self):
        rows = [{'n': 3}, {'n': 1}, {'n': 2}]
        asc = sort_rows(rows, SortState('n', SortDirection.ASC))
        desc = sort_rows(rows, SortState('n', SortDirection.DESC))
        self.assertEqual([row['n'] for row in asc], [1, 2, 3])
        self.assertEqual([row['n'] for row in desc], [3, 2, 1])

    def test_numbers_do_not_sort_as_text(self):
        rows = [{'n': 10}, {'n': 9}, {'n': 100.5}]
        result = sort_rows(rows, SortState('n', SortDirection.ASC))
        self.assertEqual([row['n'] for row in result], [9, 10, 100.5])

    def test_unsorted_keeps_input_order(self):
        rows = [{'n': 3}, {'n': 1}, {'n': 2}]
        result = sort_rows(rows, SortState.unsorted())
        self.assertEqual(result, rows)
        self.assertIsNot(result, rows)

    def test_input_is_not_mutated(self):
        rows = [{'n': 2}, {'n': 1}]
        sort_rows(rows, SortState('n', SortDirection.ASC))
        self.assertEqual(rows, [{'n': 2}, {'n': 1}])

    def test_ties_keep_input_order(self):
        rows = [
            {'group': 'b', 'id': 1},
            {'group': 'a', 'id': 2},
            {'group': 'b', 'id': 3},
            {'group': 'a', 'id': 4},
        ]
        asc = sort_rows(rows, SortState('group', SortDirection.ASC))
        desc = sort_rows(rows, SortState('group', SortDirection.DESC))
        self.assertEqual([row['id'] for row in asc], [2, 4, 1, 3])
        self.assertEqual([row['id'] for row in desc], [1, 3, 2, 4])

    def test_booleans_false_first(self):
        rows = [{'ok': True}, {'ok': False}, {'ok': True}]
        result = sort_rows(rows, SortState('ok', SortDirection.ASC))
        self.assertEqual([row['ok'] for row in result], [False, True, True])

    def test_strings_ignore_case(self):
        rows = [{'s': 'banana'}, {'s': 'Apple'}, {'s': 'cherry'}]
        result = sort_rows(rows, SortState('s', SortDirection.ASC))
        self.assertEqual([row['s'] for row in result], ['Apple', 'banana', 'cherry'])

    def test_missing_values_sort_as_empty_string(self):
        rows = [{'s': 'b'}, {'s': None}, {}]
        result = sort_rows(rows, SortState('s', SortDirection.ASC))
        self.assertEqual(result[-1], {'s': 'b'})


class TestCompareValues(unittest.TestCase):

    def test_raw_value(self):
        self.assertEqual(raw_value({'a': None}, 'a'), '')
        self.assertEqual(raw_value({}, 'a'), '')
        self.assertEqual(raw_value({'a': 5}, 'a'), 5)
        self.assertIs(raw_value({'a': True}, 'a'), True)
        self.assertEqual(raw_value({'a': ['x']}, 'a'), "['x']")

    def test_three_way_results(self):
        self.assertEqual(compare_values(1, 2), -1)
        self.assertEqual(compare_values(2, 1), 1)
        self.assertEqual(compare_values(2, 2), 0)
        self.assertEqual(compare_values(False, True), -1)
        self.assertEqual(compare_values('a', 'B'), -1)
        self.assertEqual(compare_values('abc', 'ABC'), 0)


class TestSortCycle(unittest.TestCase):

    def test_same_column_cycles(self):
        state = SortState.unsorted()
        state = next_sort_state(state, 'name')
        self.assertEqual(state, SortState('name', SortDirection.ASC))
        state = next_sort_state(state, 'name')
        self.assertEqual(state, SortState('name', SortDirection.DESC))
        state = next_sort_state(state, 'name')
        self.assertEqual(state, SortState.unsorted())
        self.assertFalse(state.is_sorted)

    def test_other_column_starts_ascending(self):
        state = SortState('name', SortDirection.DESC)
        self.assertEqual(next_sort_state(state, 'age'), SortState('age', SortDirection.ASC))

    def test_half_set_state_is_rejected(self):
        with self.assertRaises(ValueError):
            SortState('name', None)
        with self.assertRaises(ValueError):
            SortState(None, SortDirection.ASC)

    def test_sort_state_from_loose_values(self):
        self.assertEqual(sort_state_from('age', 'DESC'), SortState('age', SortDirection.DESC))
        self.assertEqual(sort_state_from('age', SortDirection.ASC), SortState('age', SortDirection.ASC))
        self.assertEqual(sort_state_from(None, 'asc'), SortState.unsorted())
        with self.assertRaises(ValueError):
            sort_state_from('age', 'sideways')


if __name__ == '__main__':
    unittest.main()
