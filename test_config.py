#!/usr/bin/env python3
"""
Tests for the JSON configuration layer and the CSV source reader
"""

import json
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from filtergrid.utils.config import DEFAULT_CONFIG, Config, TableSettings
from filtergrid.utils.csv_source import convert_value, detect_delimiter, load_rows
from filtergrid.utils.errors import ConfigurationError


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_creates_defaults(self):
        config = Config(self.temp_dir)
        self.assertTrue(config.config_file.exists())
        self.assertEqual(config.config, DEFAULT_CONFIG)
        self.assertEqual(config.table_settings(), TableSettings())

    def test_fills_missing_keys(self):
        (self.temp_dir / 'config.json').write_text(json.dumps({'filter': {'debounce_ms': 250}}))
        config = Config(self.temp_dir)

        self.assertEqual(config.get('filter', 'debounce_ms'), 250)
        self.assertTrue(config.get('filter', 'auto_apply'))
        saved = json.loads(config.config_file.read_text())
        self.assertIn('export', saved)
        self.assertEqual(saved['filter']['debounce_ms'], 250)

    def test_corrupt_file_falls_back_to_defaults(self):
        (self.temp_dir / 'config.json').write_text('{not json')
        config = Config(self.temp_dir)
        self.assertEqual(config.config, DEFAULT_CONFIG)

    def test_setters_persist(self):
        config = Config(self.temp_dir)
        config.set_filter_config(auto_apply=False, debounce_ms=100)
        config.set_export_config(file_name='people', directory='out')
        config.set('columns', 'min_width', 80)

        reloaded = Config(self.temp_dir)
        self.assertEqual(reloaded.table_settings(), TableSettings(
            auto_apply=False,
            debounce_ms=100,
            min_column_width=80,
            export_file_name='people',
            export_directory='out',
        ))


class TestCsvSource(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_convert_value(self):
        self.assertEqual(convert_value('42'), 42)
        self.assertEqual(convert_value('2.5'), 2.5)
        self.assertEqual(convert_value('abc'), 'abc')
        self.assertEqual(convert_value(''), '')
        self.assertIsNone(convert_value(None))

    def test_detect_delimiter(self):
        self.assertEqual(detect_delimiter('a;b;c\n1;2;3\n4;5;6\n'), ';')
        self.assertEqual(detect_delimiter(''), ',')

    def test_load_rows(self):
        path = self.temp_dir / 'people.csv'
        path.write_text('\ufeffname,age\nalice,29\nbob,35\n', encoding='utf-8')
        headers, rows = load_rows(path)
        self.assertEqual(headers, ['name', 'age'])
        self.assertEqual(rows, [{'name': 'alice', 'age': 29}, {'name': 'bob', 'age': 35}])

        _, raw_rows = load_rows(path, convert_numbers=False)
        self.assertEqual(raw_rows[0]['age'], '29')

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            load_rows(self.temp_dir / 'missing.csv')


if __name__ == '__main__':
    unittest.main()
