#!/usr/bin/env python3
"""
filtergrid command line front end

Loads a CSV file, applies a filter tree and a sort, and exports the result
the same way the table's export button does.

Usage:
    filtergrid people.csv --filter active.yaml --sort age --desc
    filtergrid people.csv --columns name,age --all --output-dir exports
"""

import argparse
import sys
from typing import List, Optional

from PyQt6.QtCore import QCoreApplication

from .utils.config import Config
from .utils.csv_source import load_rows
from .utils.errors import FilterGridError
from .utils.log import setup_logging
from .widgets.filterable_table import (
    ColumnDefinition,
    ExportDataType,
    FilterableTableModel,
    load_filter_file,
)


def parse_args(args):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='filtergrid - filter, sort and export CSV data')
    parser.add_argument('input', help='CSV file to load')
    parser.add_argument('--filter', '-f', help='Filter tree file (.yaml, .yml or .json)')
    parser.add_argument('--sort', '-s', help='Column key to sort by')
    parser.add_argument('--desc', action='store_true', help='Sort descending')
    parser.add_argument('--columns', '-c', help='Comma separated column keys to export')
    parser.add_argument('--all', action='store_true', help='Export all rows, ignoring the filter')
    parser.add_argument('--output-dir', '-o', help='Directory for the exported file')
    parser.add_argument('--name', '-n', help='Base name of the exported file')
    parser.add_argument('--config-dir', help='Directory holding config.json')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    return parser.parse_args(args)


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for filtergrid"""
    if args is None:
        args = sys.argv[1:]
    args = parse_args(args)

    config = Config(args.config_dir)
    logging_config = config.get_logging_config()
    logger = setup_logging(
        'DEBUG' if args.verbose else logging_config.get('level', 'INFO'),
        logging_config.get('log_file'),
    )

    # Timers need a core application even without a GUI
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv[:1])

    try:
        headers, rows = load_rows(args.input)
        columns = [ColumnDefinition(key=header, label=header) for header in headers]

        visible = None
        if args.columns:
            visible = [key.strip() for key in args.columns.split(',') if key.strip()]
            unknown = [key for key in visible if key not in headers]
            if unknown:
                logger.error("Unknown columns: %s", ", ".join(unknown))
                return 2

        default_sort = None
        if args.sort:
            if args.sort not in headers:
                logger.error("Unknown sort column: %s", args.sort)
                return 2
            default_sort = {'column': args.sort, 'direction': 'desc' if args.desc else 'asc'}

        model = FilterableTableModel(
            columns,
            rows,
            default_sort=default_sort,
            default_visible_columns=visible,
            export_file_name=args.name,
            settings=config.table_settings(),
        )

        if args.filter:
            model.filter_controller.set_root(load_filter_file(args.filter))
            model.filter_controller.commit()

        logger.info(model.summary())
        data_type = ExportDataType.ALL if args.all else ExportDataType.VISIBLE
        path = model.export_csv(data_type, directory=args.output_dir)
        model.dispose()
        print(path)
        return 0

    except FilterGridError as e:
        logger.error(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
