"""Visual editor model: widgets and the canvas."""

from .widgets import Widget, WidgetType, WIDGET_TYPES, DEFAULT_CONFIGS
from .canvas import EditorCanvas, DEVICE_SIZES, GRID_SIZE, MAX_HISTORY

__all__ = [
    "Widget",
    "WidgetType",
    "WIDGET_TYPES",
    "DEFAULT_CONFIGS",
    "EditorCanvas",
    "DEVICE_SIZES",
    "GRID_SIZE",
    "MAX_HISTORY",
]
