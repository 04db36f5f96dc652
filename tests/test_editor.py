"""Tests for the visual editor canvas and widgets."""

import pytest

from simplo_pages.editor import EditorCanvas, Widget, DEVICE_SIZES, GRID_SIZE, MAX_HISTORY
from simplo_pages.editor.canvas import DEFAULT_ZOOM, MAX_ZOOM, MIN_ZOOM


class TestWidget:
    def test_create_uses_type_defaults(self):
        form = Widget.create("form", 40, 60)
        assert form.size == {"width": 200, "height": 300}
        assert form.config["buttonStyle"] == "gradient"
        assert form.position == {"x": 40, "y": 60}

        text = Widget.create("text")
        assert text.size == {"width": 200, "height": 100}
        assert text.config == {}

    def test_default_configs_are_not_shared(self):
        a = Widget.create("image")
        b = Widget.create("image")
        a.config["filter"]["blur"] = 5
        assert b.config["filter"]["blur"] == 0

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            Widget.create("carousel")
        with pytest.raises(ValueError):
            Widget.from_dict({"type": "carousel"})

    def test_from_dict_requires_numeric_geometry(self):
        with pytest.raises(ValueError, match="numbers"):
            Widget.from_dict({"type": "text", "position": {"x": "left"}})

    @pytest.mark.parametrize("data", [
        {"type": "text", "position": [1, 2]},
        {"type": "text", "size": "big"},
    ])
    def test_from_dict_requires_geometry_objects(self, data):
        with pytest.raises(ValueError, match="objects"):
            Widget.from_dict(data)

    @pytest.mark.parametrize("config", [
        {"borderRadius": "8px"},
        {"opacity": "50%"},
        {"opacity": True},
    ])
    def test_from_dict_requires_numeric_style_values(self, config):
        with pytest.raises(ValueError, match="must be a number"):
            Widget.from_dict({"type": "image", "config": config})

    def test_numeric_style_values_accepted(self):
        widget = Widget.from_dict({"type": "image", "config": {"borderRadius": 12, "opacity": 50.5}})
        assert widget.config == {"borderRadius": 12, "opacity": 50.5}

    def test_to_dict_omits_missing_content(self):
        data = Widget.create("heading").to_dict()
        assert "content" not in data
        data = Widget.from_dict({"type": "heading", "content": "Olá"}).to_dict()
        assert data["content"] == "Olá"


class TestEditorCanvas:
    def setup_method(self):
        self.canvas = EditorCanvas()

    def test_add_snaps_to_grid_and_selects(self):
        widget = self.canvas.add_widget("text", 33, 47)
        assert widget.position == {"x": 40, "y": 40}
        assert self.canvas.selected is widget

    def test_positions_stay_inside_canvas(self):
        widget = self.canvas.add_widget("text", 5000, -300)
        bounds = DEVICE_SIZES["desktop"]
        assert widget.position["x"] == bounds["width"] - widget.size["width"]
        assert widget.position["y"] == 0

    def test_snap_can_be_disabled(self):
        canvas = EditorCanvas(snap_to_grid=False)
        widget = canvas.add_widget("text", 33, 47)
        assert widget.position == {"x": 33, "y": 47}

    def test_resize_enforces_minimum(self):
        widget = self.canvas.add_widget("button", 0, 0)
        self.canvas.resize_widget(widget.id, 3, 5)
        assert widget.size == {"width": 20, "height": 20}

    def test_resize_is_bounded_by_canvas(self):
        widget = self.canvas.add_widget("image", 1000, 0)
        self.canvas.resize_widget(widget.id, 800, 100)
        assert widget.position["x"] + widget.size["width"] <= DEVICE_SIZES["desktop"]["width"]

    def test_update_merges_config_and_sets_content(self):
        widget = self.canvas.add_widget("button")
        self.canvas.update_widget(widget.id, config={"size": "lg"}, content={"text": "Comprar", "url": "/x"})
        assert widget.config["size"] == "lg"
        assert widget.config["variant"] == "solid"
        assert widget.content == {"text": "Comprar", "url": "/x"}

    def test_update_rejects_non_numeric_radius(self):
        widget = self.canvas.add_widget("image")
        with pytest.raises(ValueError, match="borderRadius"):
            self.canvas.update_widget(widget.id, config={"borderRadius": "8px"})
        assert widget.config["borderRadius"] == 8

    def test_duplicate_offsets_copy(self):
        widget = self.canvas.add_widget("heading", 100, 100)
        self.canvas.update_widget(widget.id, content="Título")
        clone = self.canvas.duplicate_widget(widget.id)
        assert clone.id != widget.id
        assert clone.position == {"x": 100 + GRID_SIZE, "y": 100 + GRID_SIZE}
        assert clone.content == "Título"
        assert self.canvas.selected_id == clone.id

    def test_remove_clears_selection(self):
        widget = self.canvas.add_widget("text")
        assert self.canvas.remove_widget(widget.id) is True
        assert self.canvas.selected is None
        assert self.canvas.remove_widget(widget.id) is False

    def test_clear_is_undoable(self):
        self.canvas.add_widget("text")
        self.canvas.add_widget("image")
        self.canvas.clear()
        assert self.canvas.widgets == []
        assert self.canvas.undo() is True
        assert len(self.canvas.widgets) == 2

    def test_bring_to_front(self):
        first = self.canvas.add_widget("text")
        self.canvas.add_widget("image")
        self.canvas.bring_to_front(first.id)
        assert self.canvas.widgets[-1].id == first.id

    def test_unknown_widget_raises_key_error(self):
        with pytest.raises(KeyError):
            self.canvas.move_widget("missing", 0, 0)
        with pytest.raises(KeyError):
            self.canvas.select("missing")

    def test_undo_redo(self):
        widget = self.canvas.add_widget("text", 0, 0)
        self.canvas.move_widget(widget.id, 200, 200)

        assert self.canvas.undo() is True
        assert self.canvas.get_widget(widget.id).position == {"x": 0, "y": 0}
        assert self.canvas.undo() is True
        assert self.canvas.widgets == []
        assert self.canvas.undo() is False

        assert self.canvas.redo() is True
        assert self.canvas.redo() is True
        assert self.canvas.get_widget(widget.id).position == {"x": 200, "y": 200}
        assert self.canvas.redo() is False

    def test_new_action_drops_redo_branch(self):
        self.canvas.add_widget("text")
        self.canvas.undo()
        self.canvas.add_widget("image")
        assert not self.canvas.can_redo
        assert [w.type for w in self.canvas.widgets] == ["image"]

    def test_undo_clears_stale_selection(self):
        self.canvas.add_widget("text")
        self.canvas.undo()
        assert self.canvas.selected_id is None

    def test_history_is_capped(self):
        widget = self.canvas.add_widget("text")
        for i in range(MAX_HISTORY + 20):
            self.canvas.move_widget(widget.id, (i % 10) * GRID_SIZE, 0)
        assert self.canvas.history_size == MAX_HISTORY

    def test_zoom_is_clamped(self):
        assert self.canvas.zoom == DEFAULT_ZOOM
        assert self.canvas.set_zoom(500) == MAX_ZOOM
        assert self.canvas.set_zoom(10) == MIN_ZOOM
        self.canvas.set_zoom(100)
        assert self.canvas.zoom_in() == 110
        assert self.canvas.zoom_out() == 100

    def test_zoom_snaps_to_steps(self):
        assert self.canvas.set_zoom(73) == 70
        assert self.canvas.set_zoom(75) == 80
        assert self.canvas.set_zoom(199) == 200

    def test_device_changes_canvas_size(self):
        self.canvas.set_device("mobile")
        assert self.canvas.canvas_size == {"width": 375, "height": 667}
        with pytest.raises(ValueError):
            self.canvas.set_device("watch")

    def test_round_trip_through_list(self):
        self.canvas.add_widget("form", 20, 20)
        restored = EditorCanvas.from_list(self.canvas.to_list())
        assert restored.to_list() == self.canvas.to_list()
        assert not restored.can_undo

    def test_from_list_rejects_non_list(self):
        with pytest.raises(ValueError):
            EditorCanvas.from_list({"type": "text"})
