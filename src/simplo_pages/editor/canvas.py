"""Editor canvas: widget layout operations with undo/redo history."""

import copy
import logging
from typing import Dict, List, Optional, Any

from .widgets import Widget, check_config

logger = logging.getLogger(__name__)

GRID_SIZE = 20
MIN_WIDGET_SIZE = 20
DUPLICATE_OFFSET = 20
MAX_HISTORY = 100

DEVICE_SIZES = {
    "desktop": {"width": 1200, "height": 600},
    "tablet": {"width": 768, "height": 1024},
    "mobile": {"width": 375, "height": 667},
}

DEFAULT_ZOOM = 70
MIN_ZOOM = 50
MAX_ZOOM = 200
ZOOM_STEP = 10


class EditorCanvas:
    """Holds the widgets of a page being edited.

    Every mutating operation records a snapshot of the widget list so the
    editor can undo and redo. Selection, zoom, device and grid settings are
    view state and are not part of the history.
    """

    def __init__(
        self,
        widgets: Optional[List[Widget]] = None,
        device: str = "desktop",
        snap_to_grid: bool = True,
    ):
        if device not in DEVICE_SIZES:
            raise ValueError(f"Unknown device: {device}")
        self.widgets: List[Widget] = list(widgets or [])
        self.device = device
        self.snap_to_grid = snap_to_grid
        self.zoom = DEFAULT_ZOOM
        self.selected_id: Optional[str] = None

        self._history: List[List[Dict[str, Any]]] = [self._snapshot()]
        self._history_index = 0

    # === SERIALIZATION ===

    def to_list(self) -> List[Dict[str, Any]]:
        return [w.to_dict() for w in self.widgets]

    @classmethod
    def from_list(cls, items: Optional[List[Dict[str, Any]]], **kwargs) -> "EditorCanvas":
        """Load a canvas from stored widget dicts."""
        if items is None:
            items = []
        if not isinstance(items, list):
            raise ValueError("Widgets must be a list")
        return cls([Widget.from_dict(item) for item in items], **kwargs)

    # === VIEW STATE ===

    @property
    def canvas_size(self) -> Dict[str, int]:
        return dict(DEVICE_SIZES[self.device])

    def set_device(self, device: str):
        if device not in DEVICE_SIZES:
            raise ValueError(f"Unknown device: {device}")
        self.device = device

    def set_zoom(self, zoom: int) -> int:
        zoom = max(MIN_ZOOM, min(MAX_ZOOM, int(zoom)))
        self.zoom = (zoom + ZOOM_STEP // 2) // ZOOM_STEP * ZOOM_STEP
        return self.zoom

    def zoom_in(self) -> int:
        return self.set_zoom(self.zoom + ZOOM_STEP)

    def zoom_out(self) -> int:
        return self.set_zoom(self.zoom - ZOOM_STEP)

    def select(self, widget_id: Optional[str]) -> Optional[Widget]:
        if widget_id is None:
            self.selected_id = None
            return None
        widget = self.get_widget(widget_id)
        if widget is None:
            raise KeyError(widget_id)
        self.selected_id = widget_id
        return widget

    @property
    def selected(self) -> Optional[Widget]:
        return self.get_widget(self.selected_id) if self.selected_id else None

    def get_widget(self, widget_id: str) -> Optional[Widget]:
        for widget in self.widgets:
            if widget.id == widget_id:
                return widget
        return None

    def _require(self, widget_id: str) -> Widget:
        widget = self.get_widget(widget_id)
        if widget is None:
            raise KeyError(widget_id)
        return widget

    # === GEOMETRY ===

    def _snap(self, value: float) -> int:
        if not self.snap_to_grid:
            return int(round(value))
        return int(round(value / GRID_SIZE) * GRID_SIZE)

    def _clamp_position(self, widget: Widget, x: float, y: float) -> Dict[str, int]:
        bounds = DEVICE_SIZES[self.device]
        max_x = max(0, bounds["width"] - widget.size["width"])
        max_y = max(0, bounds["height"] - widget.size["height"])
        return {
            "x": max(0, min(self._snap(x), max_x)),
            "y": max(0, min(self._snap(y), max_y)),
        }

    # === MUTATIONS ===

    def add_widget(self, widget_type: str, x: float = 0, y: float = 0) -> Widget:
        widget = Widget.create(widget_type)
        widget.position = self._clamp_position(widget, x, y)
        self.widgets.append(widget)
        self.selected_id = widget.id
        self._push_history()
        return widget

    def move_widget(self, widget_id: str, x: float, y: float) -> Widget:
        widget = self._require(widget_id)
        widget.position = self._clamp_position(widget, x, y)
        self._push_history()
        return widget

    def resize_widget(self, widget_id: str, width: float, height: float) -> Widget:
        widget = self._require(widget_id)
        bounds = DEVICE_SIZES[self.device]
        width = max(MIN_WIDGET_SIZE, self._snap(width))
        height = max(MIN_WIDGET_SIZE, self._snap(height))
        widget.size = {
            "width": min(width, max(MIN_WIDGET_SIZE, bounds["width"] - widget.position["x"])),
            "height": min(height, max(MIN_WIDGET_SIZE, bounds["height"] - widget.position["y"])),
        }
        self._push_history()
        return widget

    def update_widget(
        self,
        widget_id: str,
        config: Optional[Dict[str, Any]] = None,
        content: Any = None,
    ) -> Widget:
        """Merge config keys into the widget and/or replace its content."""
        widget = self._require(widget_id)
        if config:
            check_config(config)
            widget.config = {**widget.config, **copy.deepcopy(config)}
        if content is not None:
            widget.content = copy.deepcopy(content)
        self._push_history()
        return widget

    def remove_widget(self, widget_id: str) -> bool:
        widget = self.get_widget(widget_id)
        if widget is None:
            return False
        self.widgets.remove(widget)
        if self.selected_id == widget_id:
            self.selected_id = None
        self._push_history()
        return True

    def duplicate_widget(self, widget_id: str) -> Widget:
        source = self._require(widget_id)
        clone = Widget.from_dict({**source.to_dict(), "id": None})
        clone.position = self._clamp_position(
            clone,
            source.position["x"] + DUPLICATE_OFFSET,
            source.position["y"] + DUPLICATE_OFFSET,
        )
        self.widgets.append(clone)
        self.selected_id = clone.id
        self._push_history()
        return clone

    def bring_to_front(self, widget_id: str) -> Widget:
        """Move a widget to the end of the list so it renders on top."""
        widget = self._require(widget_id)
        self.widgets.remove(widget)
        self.widgets.append(widget)
        self._push_history()
        return widget

    def clear(self):
        self.widgets = []
        self.selected_id = None
        self._push_history()

    # === HISTORY ===

    def _snapshot(self) -> List[Dict[str, Any]]:
        return self.to_list()

    def _push_history(self):
        # Drop the redo branch
        self._history = self._history[: self._history_index + 1]
        self._history.append(self._snapshot())
        if len(self._history) > MAX_HISTORY:
            self._history = self._history[-MAX_HISTORY:]
        self._history_index = len(self._history) - 1

    def _restore(self, snapshot: List[Dict[str, Any]]):
        self.widgets = [Widget.from_dict(item) for item in snapshot]
        if self.selected_id and self.get_widget(self.selected_id) is None:
            self.selected_id = None

    @property
    def can_undo(self) -> bool:
        return self._history_index > 0

    @property
    def can_redo(self) -> bool:
        return self._history_index < len(self._history) - 1

    @property
    def history_size(self) -> int:
        return len(self._history)

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self._history_index -= 1
        self._restore(self._history[self._history_index])
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            return False
        self._history_index += 1
        self._restore(self._history[self._history_index])
        return True
