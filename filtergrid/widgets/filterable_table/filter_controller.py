#!/usr/bin/env python3
"""
Filter Controller - Owns an editable filter tree and decides when it applies

Edits made while auto-apply is on are debounced through a single-shot QTimer:
every edit restarts the timer and only the last edit before the quiet period
ends publishes a predicate. A commit applies immediately in either mode.
"""

from enum import Enum
from typing import List, Optional, Sequence, Union

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from filtergrid.utils.log import get_logger

from .filter_tree import (
    ColumnOption,
    FilterValueStore,
    accept_all,
    add_condition,
    add_group,
    build_filter_with_values,
    compile_filter,
    count_conditions,
    find_path,
    first_column,
    node_at_path,
    remove_child,
    replace_at_path,
    toggle_operator,
)
from .table_types import FilterCondition, FilterGroup, copy_node, create_default_filter, iter_nodes

logger = get_logger("filter_controller")

DEFAULT_DEBOUNCE_MS = 500


class ApplyState(Enum):
    """Where the controller is in the apply cycle"""
    IDLE = "idle"
    PENDING_AUTO_APPLY = "pending_auto_apply"
    APPLIED_IMMEDIATE = "applied_immediate"


class FilterController(QObject):
    """Editing session for one filter tree"""

    # Signals
    filter_changed = pyqtSignal(object)  # Emitted with the new row predicate
    filter_reset = pyqtSignal()
    state_changed = pyqtSignal(object)  # ApplyState
    tree_changed = pyqtSignal(object)  # Emitted with the new root after a structural edit

    def __init__(self, columns: Sequence[Union[ColumnOption, str]] = (), auto_apply: bool = True,
                 debounce_ms: int = DEFAULT_DEBOUNCE_MS, parent=None):
        super().__init__(parent)
        self.columns: List[Union[ColumnOption, str]] = list(columns)
        self.store = FilterValueStore()
        self.root: FilterGroup = create_default_filter(first_column(self.columns))
        self.store.register_tree(self.root)

        self._auto_apply = auto_apply
        self._state = ApplyState.IDLE
        self._disposed = False

        # Debounce timer for auto-apply
        self.debounce_timer = QTimer(self)
        self.debounce_timer.setSingleShot(True)
        self.debounce_timer.setInterval(debounce_ms)
        self.debounce_timer.timeout.connect(self._on_debounce_timeout)

    # --- State ---

    @property
    def state(self) -> ApplyState:
        return self._state

    @property
    def auto_apply(self) -> bool:
        return self._auto_apply

    @property
    def debounce_ms(self) -> int:
        return self.debounce_timer.interval()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def is_pending(self) -> bool:
        return self.debounce_timer.isActive()

    def _set_state(self, state: ApplyState):
        if state is not self._state:
            self._state = state
            self.state_changed.emit(state)

    def set_auto_apply(self, enabled: bool):
        """Turn auto-apply on or off; turning it off drops a pending apply"""
        self._auto_apply = enabled
        if not enabled:
            self._cancel_timer()

    def set_columns(self, columns: Sequence[Union[ColumnOption, str]]):
        """Replace the column options; conditions without a column get the first one"""
        self.columns = list(columns)
        column = first_column(self.columns)
        if not column:
            return

        updated = copy_node(self.root)
        filled = False
        for node in iter_nodes(updated):
            if not isinstance(node, FilterCondition) or node.column:
                continue
            node.column = column
            values = self.store.lookup(node.id)
            if values is not None and not values.column:
                self.store.update(node.id, column=column)
            filled = True

        if filled:
            self.root = updated
            self.tree_changed.emit(self.root)

    # --- Edits ---

    def on_edit(self):
        """Record an edit: (re)arm the debounce timer when auto-apply is on"""
        if self._disposed:
            return
        self.debounce_timer.stop()
        if self._auto_apply:
            self.debounce_timer.start()
            self._set_state(ApplyState.PENDING_AUTO_APPLY)
        else:
            self._set_state(ApplyState.IDLE)

    def set_root(self, root: FilterGroup):
        """Replace the whole tree; store entries of dropped nodes are discarded"""
        if self._disposed:
            return
        self.store.discard_subtree(self.root)
        self.root = copy_node(root)
        self.store.register_tree(self.root)
        self.tree_changed.emit(self.root)
        self.on_edit()

    def _edit_group(self, group_id: Optional[str], edit) -> bool:
        if self._disposed:
            return False
        target_id = group_id or self.root.id
        path = find_path(self.root, target_id)
        if path is None:
            logger.warning("Filter group %s not found, edit ignored", target_id)
            return False
        group = node_at_path(self.root, path)
        if not isinstance(group, FilterGroup):
            logger.warning("Filter node %s is not a group, edit ignored", target_id)
            return False

        try:
            updated = edit(group)
        except IndexError as e:
            logger.warning("Stale edit on filter group %s ignored: %s", target_id, e)
            return False

        self.root = replace_at_path(self.root, path, updated)
        self.tree_changed.emit(self.root)
        self.on_edit()
        return True

    def add_condition(self, group_id: Optional[str] = None) -> bool:
        return self._edit_group(group_id, lambda group: add_condition(group, self.columns, self.store))

    def add_group(self, group_id: Optional[str] = None) -> bool:
        return self._edit_group(group_id, lambda group: add_group(group, self.columns, self.store))

    def remove_child(self, group_id: Optional[str], index: int) -> bool:
        return self._edit_group(group_id, lambda group: remove_child(group, index, self.store))

    def toggle_operator(self, group_id: Optional[str] = None) -> bool:
        return self._edit_group(group_id, toggle_operator)

    def set_condition_value(self, condition_id: str, column: Optional[str] = None,
                            pattern: Optional[str] = None, case_sensitive: Optional[bool] = None) -> bool:
        """Change a condition's live values without rebuilding the tree"""
        if self._disposed:
            return False
        path = find_path(self.root, condition_id)
        if path is None:
            logger.warning("Filter condition %s not found, value change ignored", condition_id)
            return False
        condition = node_at_path(self.root, path)
        if not isinstance(condition, FilterCondition):
            logger.warning("Filter node %s is not a condition, value change ignored", condition_id)
            return False

        # Seed from structural values if the entry is gone
        self.store.get(condition.id, condition.column, condition.pattern, condition.case_sensitive)
        self.store.update(condition.id, column=column, pattern=pattern, case_sensitive=case_sensitive)
        self.on_edit()
        return True

    # --- Apply ---

    def current_filter(self) -> FilterGroup:
        """Snapshot of the tree with live values merged in"""
        return build_filter_with_values(self.root, self.store)

    def apply(self):
        """Compile the current tree and publish its predicate"""
        snapshot = self.current_filter()
        total, active = count_conditions(snapshot)
        logger.debug("Applying filter %s (%d conditions, %d active)", snapshot.id, total, active)
        self.filter_changed.emit(compile_filter(snapshot))

    def commit(self):
        """Apply now, cancelling any pending auto-apply"""
        if self._disposed:
            return
        self._cancel_timer()
        self.apply()
        self._set_state(ApplyState.APPLIED_IMMEDIATE)

    def reset(self):
        """Publish the accept-all predicate; the tree itself is left as is"""
        if self._disposed:
            return
        self._cancel_timer()
        self.filter_changed.emit(accept_all)
        self.filter_reset.emit()
        self._set_state(ApplyState.IDLE)

    def dispose(self):
        """Stop the timer for good; later edits are ignored"""
        self._cancel_timer()
        self._disposed = True
        self._set_state(ApplyState.IDLE)

    def _cancel_timer(self):
        if self.debounce_timer.isActive():
            self.debounce_timer.stop()
            if self._state is ApplyState.PENDING_AUTO_APPLY:
                self._set_state(ApplyState.IDLE)

    def _on_debounce_timeout(self):
        if self._disposed:
            return
        self.apply()
        self._set_state(ApplyState.IDLE)
