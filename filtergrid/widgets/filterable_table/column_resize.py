#!/usr/bin/env python3
"""
Column Resize - Two-column width redistribution

Dragging the border between two adjacent visible columns moves width from
one to the other. Their combined width never changes and neither drops below
the minimum width.
"""

import math
import re
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

from PyQt6.QtCore import QEvent, QObject, pyqtSignal
from PyQt6.QtGui import QMouseEvent

from filtergrid.utils.log import get_logger

from .table_types import ColumnDefinition

logger = get_logger("resize")

DEFAULT_MIN_WIDTH = 50

_PX_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px)?\s*$", re.IGNORECASE)


def compute_resize(left_start_width: float, right_start_width: float, delta: float,
                   min_width: float) -> Tuple[float, float]:
    """New (left, right) widths after moving the border by delta.

    >>> compute_resize(100, 100, 30, 50)
    (130, 70)
    >>> compute_resize(100, 100, 70, 50)
    (150, 50)
    """
    total = left_start_width + right_start_width
    new_left = left_start_width + delta
    new_right = right_start_width - delta

    if new_left < min_width:
        new_left = min_width
        new_right = total - min_width
    elif new_right < min_width:
        new_right = min_width
        new_left = total - min_width

    return new_left, new_right


def format_px(width: float) -> str:
    """CSS pixel length; whole numbers print without a fraction"""
    if float(width).is_integer():
        return f"{int(width)}px"
    return f"{round(width, 2)}px"


def parse_px(value: Optional[str]) -> Optional[float]:
    """Pixel value of a CSS length like "120px" or "120"; None for other units"""
    if value is None:
        return None
    match = _PX_PATTERN.match(str(value))
    if not match:
        return None
    return float(match.group(1))


def visible_definitions(columns: Sequence[ColumnDefinition], visible_keys: Sequence[str]):
    """Visible columns in schema order"""
    keys = set(visible_keys)
    return [col for col in columns if col.key in keys]


def can_resize(columns: Sequence[ColumnDefinition], visible_keys: Sequence[str], index: int,
               allow_resize: bool = True) -> bool:
    """Whether a resizer sits between visible column index and its right neighbour"""
    if not allow_resize:
        return False
    cols = visible_definitions(columns, visible_keys)
    if index < 0 or index + 1 >= len(cols):
        return False  # No resizer after the last column
    return cols[index].resizable and cols[index + 1].resizable


@dataclass
class ResizeSession:
    """State of one drag in progress"""
    left_column: str
    right_column: str
    start_x: float
    left_start_width: float
    right_start_width: float
    min_width: float


class ColumnResizer(QObject):
    """Tracks a single column drag and publishes new widths.

    While a drag is active the resizer can watch another object (typically
    the header view) through an event filter; the filter is removed as soon
    as the drag ends or the resizer is disposed.
    """

    # Signals
    column_resized = pyqtSignal(str, str)  # column key, CSS width
    resize_started = pyqtSignal(str)
    resize_finished = pyqtSignal(str)

    def __init__(self, min_width: float = DEFAULT_MIN_WIDTH, parent=None):
        super().__init__(parent)
        self.default_min_width = min_width
        self.session: Optional[ResizeSession] = None
        self._watched: Optional[QObject] = None

    @property
    def resizing_column(self) -> Optional[str]:
        return self.session.left_column if self.session else None

    def is_active(self) -> bool:
        return self.session is not None

    def is_listening(self) -> bool:
        return self._watched is not None

    def _min_width_for(self, column: ColumnDefinition) -> float:
        parsed = parse_px(column.min_width)
        return parsed if parsed is not None else self.default_min_width

    def begin(self, columns: Sequence[ColumnDefinition], visible_keys: Sequence[str], index: int,
              start_x: float, rendered_widths: Mapping[str, float], allow_resize: bool = True,
              watched: Optional[QObject] = None) -> bool:
        """Start dragging the border right of visible column index.

        Every visible column is first pinned to its rendered pixel width so
        the columns not involved in the drag keep their size.
        """
        if self.session is not None:
            logger.debug("Resize of %s already active, new drag ignored", self.session.left_column)
            return False
        if not can_resize(columns, visible_keys, index, allow_resize):
            return False

        cols = visible_definitions(columns, visible_keys)
        left_col, right_col = cols[index], cols[index + 1]
        if left_col.key not in rendered_widths or right_col.key not in rendered_widths:
            logger.warning("No rendered width for %s/%s, resize ignored", left_col.key, right_col.key)
            return False

        # Re-baseline all visible columns to fixed pixels
        for col in cols:
            if col.key in rendered_widths:
                self.column_resized.emit(col.key, format_px(rendered_widths[col.key]))

        self.session = ResizeSession(
            left_column=left_col.key,
            right_column=right_col.key,
            start_x=start_x,
            left_start_width=rendered_widths[left_col.key],
            right_start_width=rendered_widths[right_col.key],
            min_width=self._min_width_for(left_col),
        )

        if watched is not None:
            watched.installEventFilter(self)
            self._watched = watched

        self.resize_started.emit(left_col.key)
        return True

    def move(self, x: float) -> Optional[Tuple[str, str]]:
        """Pointer moved to x; publishes both new widths together"""
        session = self.session
        if session is None:
            return None

        new_left, new_right = compute_resize(
            session.left_start_width,
            session.right_start_width,
            x - session.start_x,
            session.min_width,
        )
        left_css, right_css = format_px(new_left), format_px(new_right)
        self.column_resized.emit(session.left_column, left_css)
        self.column_resized.emit(session.right_column, right_css)
        return left_css, right_css

    def end(self):
        """Pointer released: finish the drag and stop listening"""
        self._stop_listening()
        session, self.session = self.session, None
        if session is not None:
            self.resize_finished.emit(session.left_column)

    def dispose(self):
        self.end()

    def _stop_listening(self):
        if self._watched is not None:
            self._watched.removeEventFilter(self)
            self._watched = None

    def eventFilter(self, watched, event):
        if self.session is not None:
            if event.type() == QEvent.Type.MouseMove and isinstance(event, QMouseEvent):
                self.move(event.position().x())
                return True
            if event.type() == QEvent.Type.MouseButtonRelease:
                self.end()
                return True
        return super().eventFilter(watched, event)


def initial_column_widths(columns: Sequence[ColumnDefinition]) -> Dict[str, str]:
    """Starting width map: explicit widths, else an even share of 100%"""
    if not columns:
        return {}
    default_width = f"{math.floor(100 / len(columns))}%"
    return {col.key: col.width or default_width for col in columns}
