#!/usr/bin/env python3
"""
Filterable Table Model - Orchestrates filter, sort, columns and export

Holds everything a table view needs besides pixels: the active predicate,
the sort state, which columns are visible, how wide they are, and the
processed row list. Views connect to the signals and call the handlers.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from PyQt6.QtCore import QObject, pyqtSignal

from filtergrid.utils.config import TableSettings
from filtergrid.utils.errors import ExportError
from filtergrid.utils.log import get_logger

from .column_resize import ColumnResizer, initial_column_widths
from .csv_export import build_csv_document, write_csv
from .filter_controller import FilterController
from .filter_tree import Predicate, accept_all, filter_rows
from .sort_engine import next_sort_state, sort_rows, sort_state_from
from .table_types import ColumnDefinition, ExportDataType, Row, SortState

logger = get_logger("table")


class FilterableTableModel(QObject):
    """Filter -> sort pipeline over an in-memory row collection"""

    # Signals
    filtered_data_changed = pyqtSignal(object)  # Emitted with processed rows on every recomputation
    sort_changed = pyqtSignal(object)  # SortState
    visible_columns_changed = pyqtSignal(object)
    column_widths_changed = pyqtSignal(object)
    export_finished = pyqtSignal(str)  # Path of the written file

    def __init__(self, columns: Sequence[ColumnDefinition], data: Optional[Sequence[Row]] = None,
                 default_sort: Optional[Dict[str, Any]] = None,
                 default_visible_columns: Optional[Sequence[str]] = None,
                 row_class: Optional[Callable[[Row], str]] = None,
                 on_filtered_data_change: Optional[Callable[[List[Row]], None]] = None,
                 show_export: bool = True, show_column_selector: bool = True,
                 allow_resize: bool = True, export_file_name: Optional[str] = None,
                 settings: Optional[TableSettings] = None, parent=None):
        super().__init__(parent)
        self.settings = settings or TableSettings()
        self.columns: List[ColumnDefinition] = list(columns)
        self.data: List[Row] = list(data or [])
        self.row_class = row_class
        self.on_filtered_data_change = on_filtered_data_change

        # Feature toggles
        self.show_export = show_export
        self.show_column_selector = show_column_selector
        self.allow_resize = allow_resize
        self.export_file_name = export_file_name or self.settings.export_file_name

        self._predicate: Predicate = accept_all
        self._sort_state = SortState.unsorted()
        if default_sort:
            self._sort_state = sort_state_from(default_sort.get('column'), default_sort.get('direction'))
        self._visible_columns: List[str] = (
            list(default_visible_columns) if default_visible_columns is not None else self.all_column_keys()
        )
        self._column_widths: Dict[str, str] = initial_column_widths(self.columns)
        self._processed_rows: List[Row] = []

        # Filter editing session
        self.filter_controller = FilterController(
            columns=self.filter_columns(),
            auto_apply=self.settings.auto_apply,
            debounce_ms=self.settings.debounce_ms,
            parent=self,
        )
        self.filter_controller.filter_changed.connect(self.handle_filter_change)
        self.filter_controller.filter_reset.connect(self.reset)

        # Column resizing
        self.resizer = ColumnResizer(min_width=self.settings.min_column_width, parent=self)
        self.resizer.column_resized.connect(self.handle_column_resize)

        self.recompute()

    # --- Columns ---

    def all_column_keys(self) -> List[str]:
        return [col.key for col in self.columns]

    def get_column(self, key: str) -> Optional[ColumnDefinition]:
        for col in self.columns:
            if col.key == key:
                return col
        return None

    def filter_columns(self) -> List[Dict[str, str]]:
        """Column options offered by the condition editor"""
        return [{'value': col.key, 'label': col.label} for col in self.columns]

    @property
    def visible_columns(self) -> List[str]:
        return list(self._visible_columns)

    def visible_column_definitions(self) -> List[ColumnDefinition]:
        """Visible columns in schema order"""
        visible = set(self._visible_columns)
        return [col for col in self.columns if col.key in visible]

    def _set_visible_columns(self, keys: Sequence[str]):
        self._visible_columns = list(keys)
        self.visible_columns_changed.emit(self.visible_columns)

    def toggle_column(self, key: str) -> bool:
        """Show or hide a column; the last visible column cannot be hidden"""
        if key in self._visible_columns:
            if len(self._visible_columns) <= 1:
                return False
            self._set_visible_columns([k for k in self._visible_columns if k != key])
        else:
            if self.get_column(key) is None:
                logger.warning("Unknown column %s, toggle ignored", key)
                return False
            self._set_visible_columns(self._visible_columns + [key])
        return True

    def select_all_columns(self):
        self._set_visible_columns(self.all_column_keys())

    def select_no_columns(self):
        """Reduce to the first column only"""
        keys = self.all_column_keys()
        self._set_visible_columns(keys[:1])

    def set_default_visible_columns(self, keys: Optional[Sequence[str]]):
        """A new caller default replaces the visible set wholesale"""
        if keys is not None:
            self._set_visible_columns(keys)

    def column_selector_label(self) -> str:
        return f"Columns ({len(self._visible_columns)}/{len(self.columns)})"

    # --- Widths ---

    @property
    def column_widths(self) -> Dict[str, str]:
        return dict(self._column_widths)

    def handle_column_resize(self, key: str, width: str):
        self._column_widths[key] = width
        self.column_widths_changed.emit(self.column_widths)

    def begin_resize(self, index: int, start_x: float, rendered_widths: Dict[str, float],
                     watched: Optional[QObject] = None) -> bool:
        """Start dragging the border right of visible column index"""
        return self.resizer.begin(
            self.columns,
            self._visible_columns,
            index,
            start_x,
            rendered_widths,
            allow_resize=self.allow_resize,
            watched=watched,
        )

    def header_style(self, column: ColumnDefinition) -> Dict[str, str]:
        style: Dict[str, str] = {}
        width = self._column_widths.get(column.key) or column.width
        if width:
            style['width'] = width
        if column.align:
            style['text-align'] = column.align.value
        if column.min_width:
            style['min-width'] = column.min_width
        return style

    def cell_style(self, column: ColumnDefinition) -> Dict[str, str]:
        if column.align:
            return {'text-align': column.align.value}
        return {}

    def header_classes(self, column: ColumnDefinition) -> List[str]:
        classes = ['table-header']
        if column.sortable:
            classes.append('sortable-header')
        if column.class_name:
            classes.append(column.class_name)
        if self.resizer.resizing_column == column.key:
            classes.append('resizing')
        return classes

    # --- Sorting ---

    @property
    def sort_state(self) -> SortState:
        return self._sort_state

    def set_sort_state(self, state: SortState):
        self._sort_state = state
        self.sort_changed.emit(state)
        self.recompute()

    def handle_sort_change(self, key: str) -> SortState:
        """Header click on column key"""
        column = self.get_column(key)
        if column is None or not column.sortable:
            return self._sort_state
        self.set_sort_state(next_sort_state(self._sort_state, key))
        return self._sort_state

    def reset(self):
        """Clear the sort (the filter side of a reset is handled by the controller)"""
        self.set_sort_state(SortState.unsorted())

    # --- Data pipeline ---

    def set_data(self, data: Sequence[Row]):
        self.data = list(data)
        self.recompute()

    def handle_filter_change(self, predicate: Predicate):
        self._predicate = predicate
        self.recompute()

    @property
    def predicate(self) -> Predicate:
        return self._predicate

    @property
    def processed_rows(self) -> List[Row]:
        return list(self._processed_rows)

    def recompute(self) -> List[Row]:
        """processed = sort(filter(data)); reported on every call"""
        filtered = filter_rows(self.data, self._predicate)
        self._processed_rows = sort_rows(filtered, self._sort_state)
        logger.debug("Processed %d of %d rows", len(self._processed_rows), len(self.data))

        rows = self.processed_rows
        self.filtered_data_changed.emit(rows)
        if self.on_filtered_data_change is not None:
            self.on_filtered_data_change(rows)
        return rows

    def summary(self) -> str:
        return f"Showing {len(self._processed_rows)} of {len(self.data)} items"

    # --- Display helpers ---

    def cell_display(self, row: Row, column: ColumnDefinition, index: int) -> Any:
        value = row.get(column.key)
        if column.render is not None:
            return column.render(value, row, index)
        if value is None:
            return "-"
        if isinstance(value, bool):
            return "Yes" if value else "No"
        return str(value)

    def row_class_for(self, row: Row) -> str:
        return self.row_class(row) if self.row_class else ""

    # --- Export ---

    def _export_rows(self, data_type: Union[ExportDataType, str]) -> List[Row]:
        data_type = ExportDataType(data_type) if isinstance(data_type, str) else data_type
        return self.processed_rows if data_type is ExportDataType.VISIBLE else list(self.data)

    def build_csv(self, data_type: Union[ExportDataType, str] = ExportDataType.VISIBLE) -> str:
        """CSV document (with byte order mark) for the visible columns"""
        return build_csv_document(self._export_rows(data_type), self.visible_column_definitions())

    def export_csv(self, data_type: Union[ExportDataType, str] = ExportDataType.VISIBLE,
                   directory: Optional[Union[str, Path]] = None,
                   now: Optional[datetime] = None) -> Path:
        """Write the export file and return its path"""
        if not self.show_export:
            raise ExportError("Export is disabled for this table")

        rows = self._export_rows(data_type)
        path = write_csv(
            rows,
            self.visible_column_definitions(),
            directory=directory or self.settings.export_directory,
            base_name=self.export_file_name,
            now=now,
        )
        self.export_finished.emit(str(path))
        return path

    def dispose(self):
        """Tear down timers and any drag in progress"""
        self.filter_controller.dispose()
        self.resizer.dispose()
