"""Widget model for the visual page editor."""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional

from ..storage.models import new_id


class WidgetType(Enum):
    """Blocks that can be dropped on the canvas."""
    IMAGE = "image"
    TEXT = "text"
    BUTTON = "button"
    FORM = "form"
    VIDEO = "video"
    HEADING = "heading"
    LINK = "link"
    LIST = "list"
    ORDERED_LIST = "ordered-list"


WIDGET_TYPES = {t.value for t in WidgetType}

DEFAULT_SIZE = {"width": 200, "height": 100}
DEFAULT_FORM_SIZE = {"width": 200, "height": 300}

DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "image": {
        "borderRadius": 8,
        "shadow": False,
        "opacity": 100,
        "fit": "cover",
        "filter": {
            "brightness": 100,
            "contrast": 100,
            "blur": 0,
            "grayscale": 0,
        },
        "border": {
            "width": 0,
            "color": "#ffffff",
            "style": "solid",
        },
    },
    "button": {
        "variant": "solid",
        "size": "md",
        "borderRadius": 8,
        "colorScheme": "gradient",
        "shadow": False,
        "padding": {"x": 4, "y": 2},
        "font": {"weight": "medium", "transform": "none"},
    },
    "form": {
        "borderRadius": 8,
        "backgroundColor": "rgba(24, 24, 27, 0.5)",
        "buttonStyle": "gradient",
        "buttonColor": "purple",
        "labelColor": "#ffffff",
        "inputStyle": "outline",
    },
}


# Config values the renderer reads as numbers
NUMERIC_CONFIG_KEYS = ("borderRadius", "opacity")


def default_config(widget_type: str) -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIGS.get(widget_type, {}))


def check_config(config: Dict[str, Any]):
    """Reject config values the renderer cannot use."""
    for key in NUMERIC_CONFIG_KEYS:
        value = config.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ValueError(f"Widget config '{key}' must be a number")


def default_size(widget_type: str) -> Dict[str, int]:
    return dict(DEFAULT_FORM_SIZE if widget_type == WidgetType.FORM.value else DEFAULT_SIZE)


@dataclass
class Widget:
    """A block placed on the canvas at an absolute position."""
    type: str
    id: str = field(default_factory=new_id)
    position: Dict[str, int] = field(default_factory=lambda: {"x": 0, "y": 0})
    size: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_SIZE))
    config: Dict[str, Any] = field(default_factory=dict)
    content: Optional[Any] = None

    def __post_init__(self):
        if self.type not in WIDGET_TYPES:
            raise ValueError(f"Unknown widget type: {self.type}")

    @classmethod
    def create(cls, widget_type: str, x: int = 0, y: int = 0) -> "Widget":
        """Build a widget with the default size and config for its type."""
        if widget_type not in WIDGET_TYPES:
            raise ValueError(f"Unknown widget type: {widget_type}")
        return cls(
            type=widget_type,
            position={"x": int(x), "y": int(y)},
            size=default_size(widget_type),
            config=default_config(widget_type),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type,
            "position": dict(self.position),
            "size": dict(self.size),
            "config": copy.deepcopy(self.config),
        }
        if self.content is not None:
            data["content"] = copy.deepcopy(self.content)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Widget":
        if not isinstance(data, dict):
            raise ValueError("Widget must be an object")
        widget_type = data.get("type")
        if widget_type not in WIDGET_TYPES:
            raise ValueError(f"Unknown widget type: {widget_type}")

        position = data.get("position") or {}
        size = data.get("size") or default_size(widget_type)
        if not isinstance(position, dict) or not isinstance(size, dict):
            raise ValueError("Widget position and size must be objects")
        try:
            position = {"x": int(position.get("x", 0)), "y": int(position.get("y", 0))}
            size = {"width": int(size["width"]), "height": int(size["height"])}
        except (KeyError, TypeError, ValueError, OverflowError):
            raise ValueError("Widget position and size must be numbers")

        config = data.get("config")
        if config is None:
            config = default_config(widget_type)
        elif not isinstance(config, dict):
            raise ValueError("Widget config must be an object")
        check_config(config)

        return cls(
            id=data.get("id") or new_id(),
            type=widget_type,
            position=position,
            size=size,
            config=copy.deepcopy(config),
            content=copy.deepcopy(data.get("content")),
        )
