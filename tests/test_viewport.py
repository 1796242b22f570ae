"""Tests for fit-to-view geometry and the viewport controller."""

from types import SimpleNamespace

import pytest

from flowfunc.viewport import Bounds, Transform, ViewportController, fit_to_view, node_bounds


class RecordingEngine:
    def __init__(self):
        self.transforms = []

    def set_transform(self, *, x, y, scale):
        self.transforms.append((x, y, scale))


TWO_NODES = {"a": {"id": "a", "x": 0, "y": 0}, "b": {"id": "b", "x": 100, "y": 100}}


class TestFitToView:
    def test_two_nodes_in_square_viewport(self):
        transform = fit_to_view(TWO_NODES, 500, 500, padding=150)
        assert transform == Transform(x=187.5, y=187.5, scale=1.25)

    def test_empty_nodes_is_noop(self):
        assert fit_to_view({}, 500, 500) is None

    def test_identical_inputs_give_identical_transforms(self):
        assert fit_to_view(TWO_NODES, 800, 600) == fit_to_view(TWO_NODES, 800, 600)

    def test_smaller_axis_ratio_wins(self):
        # Padded box is 400 x 400; 800/400 = 2, 200/400 = 0.5
        transform = fit_to_view(TWO_NODES, 800, 200)
        assert transform.scale == 0.5
        assert transform.x == pytest.approx(400 - 50 * 0.5)
        assert transform.y == pytest.approx(100 - 50 * 0.5)

    def test_min_scale_clamps_zoom_out(self):
        far = {"a": {"x": 0, "y": 0}, "b": {"x": 100_000, "y": 100_000}}
        transform = fit_to_view(far, 500, 500)
        assert transform.scale == 0.1

    def test_no_upper_clamp(self):
        transform = fit_to_view({"a": {"x": 0, "y": 0}}, 3000, 3000, padding=10)
        assert transform.scale == pytest.approx(150.0)

    def test_single_node_is_centered(self):
        transform = fit_to_view({"a": {"x": 40, "y": -20}}, 600, 400)
        # Padded box is 300 x 300 around (40, -20)
        assert transform.scale == pytest.approx(400 / 300)
        assert transform.x + 40 * transform.scale == pytest.approx(300)
        assert transform.y - 20 * transform.scale == pytest.approx(200)

    def test_zero_size_box_is_noop(self):
        assert fit_to_view({"a": {"x": 5, "y": 5}}, 500, 500, padding=0) is None

    @pytest.mark.parametrize("width, height", [(0, 500), (500, 0), (-1, -1)])
    def test_empty_viewport_is_noop(self, width, height):
        assert fit_to_view(TWO_NODES, width, height) is None

    def test_accepts_iterables_of_objects(self):
        nodes = [SimpleNamespace(x=0, y=0), SimpleNamespace(x=100, y=100)]
        assert fit_to_view(nodes, 500, 500) == fit_to_view(TWO_NODES, 500, 500)

    def test_node_size_is_not_considered(self):
        sized = {k: {**v, "width": 400, "height": 300} for k, v in TWO_NODES.items()}
        assert fit_to_view(sized, 500, 500) == fit_to_view(TWO_NODES, 500, 500)


class TestBounds:
    def test_node_bounds(self):
        assert node_bounds(TWO_NODES) == Bounds(0, 0, 100, 100)

    def test_expand(self):
        padded = Bounds(0, 0, 100, 100).expand(150)
        assert (padded.width, padded.height, padded.center) == (400, 400, (50, 50))

    def test_no_nodes(self):
        assert node_bounds([]) is None


class TestTransform:
    @pytest.mark.parametrize("scale", [0, -1])
    def test_scale_must_be_positive(self, scale):
        with pytest.raises(ValueError):
            Transform(scale=scale)


class TestViewportController:
    def test_fit_applies_live_transform_and_rotates_key(self):
        controller = ViewportController()
        engine = RecordingEngine()
        key = controller.key

        transform = controller.fit(TWO_NODES, 500, 500, engine)

        assert engine.transforms == [(187.5, 187.5, 1.25)]
        assert controller.transform == transform
        assert controller.initial_scale == 1.25
        assert controller.key != key

    def test_noop_fit_changes_nothing(self):
        controller = ViewportController(initial_scale=0.8)
        engine = RecordingEngine()
        before = (controller.transform, controller.key)

        assert controller.fit({}, 500, 500, engine) is None
        assert (controller.transform, controller.key) == before
        assert engine.transforms == []

    def test_fit_without_engine(self):
        controller = ViewportController()
        assert controller.fit(TWO_NODES, 500, 500) == Transform(187.5, 187.5, 1.25)

    def test_uses_configured_padding_and_min_scale(self):
        controller = ViewportController(padding=0, min_scale=2.0)
        assert controller.fit(TWO_NODES, 100, 100).scale == 2.0

    def test_request_fit_only_on_rising_edge(self):
        controller = ViewportController()
        engine = RecordingEngine()

        assert controller.request_fit(False, TWO_NODES, 500, 500, engine) is None
        assert controller.request_fit(True, TWO_NODES, 500, 500, engine) is not None
        assert controller.request_fit(True, TWO_NODES, 500, 500, engine) is None
        assert controller.request_fit(False, TWO_NODES, 500, 500, engine) is None
        assert controller.request_fit(True, TWO_NODES, 500, 500, engine) is not None
        assert len(engine.transforms) == 2

    def test_initial_trigger_state_is_not_an_edge(self):
        controller = ViewportController(fit_trigger=True)
        assert controller.request_fit(True, TWO_NODES, 500, 500) is None

    def test_remount_rotates_key(self):
        controller = ViewportController()
        key = controller.key
        assert controller.remount() != key
