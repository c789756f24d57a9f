import pytest

from notegraph.view.viewport import Rect, Viewport, graph_bounds

SURFACE = Rect(0, 0, 1024, 768)
POSITIONS = [(-50.0, -20.0), (150.0, 80.0), (10.0, 30.0)]


def test_graph_bounds() -> None:
    assert graph_bounds(POSITIONS) == Rect(-50.0, -20.0, 200.0, 100.0)


def test_graph_bounds_degenerate() -> None:
    assert graph_bounds([]) == Rect(0.0, 0.0, 1.0, 1.0)
    assert graph_bounds([(3.0, 4.0)]) == Rect(3.0, 4.0, 1.0, 1.0)
    assert graph_bounds([(0.0, 1.0), (0.0, 5.0)]) == Rect(0.0, 1.0, 1.0, 4.0)


def test_bounds_corners_map_to_padded_surface() -> None:
    vp = Viewport(padding=20.0)
    bounds = graph_bounds(POSITIONS)
    assert vp.to_screen((-50.0, -20.0), bounds, SURFACE) == pytest.approx((20.0, 20.0))
    assert vp.to_screen((150.0, 80.0), bounds, SURFACE) == pytest.approx((1004.0, 748.0))


def test_to_layout_inverts_to_screen() -> None:
    vp = Viewport(zoom=1.7, pan_x=33.0, pan_y=-12.0)
    bounds = graph_bounds(POSITIONS)
    for p in POSITIONS:
        screen = vp.to_screen(p, bounds, SURFACE)
        assert vp.to_layout(screen, bounds, SURFACE) == pytest.approx(p)


def test_pick_coincident_point_returns_node() -> None:
    vp = Viewport(zoom=2.0, pan_x=-100.0, pan_y=40.0)
    bounds = graph_bounds(POSITIONS)
    for idx, p in enumerate(POSITIONS):
        assert vp.nearest_node(vp.to_screen(p, bounds, SURFACE), POSITIONS, SURFACE) == idx


def test_pick_respects_threshold() -> None:
    vp = Viewport(pick_threshold=5.0)
    bounds = graph_bounds(POSITIONS)
    near = vp.to_screen((12.0, 30.0), bounds, SURFACE)
    far = vp.to_screen((40.0, 50.0), bounds, SURFACE)
    assert vp.nearest_node(near, POSITIONS, SURFACE) == 2
    assert vp.nearest_node(far, POSITIONS, SURFACE) is None


def test_pick_between_distant_nodes_is_a_miss() -> None:
    positions = [(0.0, 0.0), (100.0, 0.0)]
    vp = Viewport(pick_threshold=10.0)
    bounds = graph_bounds(positions)
    point = vp.to_screen((50.0, 0.0), bounds, SURFACE)
    assert vp.nearest_node(point, positions, SURFACE) is None


def test_pick_empty_graph() -> None:
    assert Viewport().nearest_node((10.0, 10.0), [], SURFACE) is None


def test_zoom_is_clamped_at_maximum() -> None:
    vp = Viewport(max_zoom=3.0)
    while vp.zoom_at((100.0, 100.0), 10.0, SURFACE):
        pass
    assert vp.zoom == 3.0
    pan = (vp.pan_x, vp.pan_y)

    for _ in range(5):
        assert vp.zoom_at((100.0, 100.0), 10.0, SURFACE) is False
    assert vp.zoom == 3.0
    assert (vp.pan_x, vp.pan_y) == pan


def test_zoom_is_clamped_at_minimum() -> None:
    vp = Viewport(min_zoom=0.5)
    for _ in range(100):
        vp.zoom_at((0.0, 0.0), -10.0, SURFACE)
    assert vp.zoom == 0.5


def test_zoom_at_centre_does_not_pan() -> None:
    vp = Viewport()
    assert vp.zoom_at(SURFACE.center, 3.0, SURFACE)
    assert vp.zoom == pytest.approx(1.1)
    assert (vp.pan_x, vp.pan_y) == (0.0, 0.0)


def test_zoom_pan_correction() -> None:
    vp = Viewport()
    vp.zoom_at((612.0, 384.0), 3.0, SURFACE)
    # cursor 100px right of centre, dz = 0.1, old zoom 1
    assert vp.pan_x == pytest.approx(-10.0)
    assert vp.pan_y == pytest.approx(0.0)


def test_pan_and_reset() -> None:
    vp = Viewport()
    vp.pan_by(5.0, -3.0)
    vp.pan_by(1.0, 1.0)
    assert (vp.pan_x, vp.pan_y) == (6.0, -2.0)
    vp.zoom_at((0.0, 0.0), 3.0, SURFACE)
    vp.reset()
    assert (vp.zoom, vp.pan_x, vp.pan_y) == (1.0, 0.0, 0.0)


def test_invalid_zoom_bounds() -> None:
    with pytest.raises(ValueError):
        Viewport(min_zoom=2.0, max_zoom=1.0)


def test_scroll_divisor_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Viewport(scroll_divisor=0.0)


def test_zoom_anchor_drift() -> None:
    vp = Viewport()
    bounds = graph_bounds(POSITIONS)
    cursor = (612.0, 384.0)
    anchor = vp.to_layout(cursor, bounds, SURFACE)

    vp.zoom_at(cursor, 3.0, SURFACE)

    # Offsets from the padded corner (20, 20) grow by the zoom ratio 1.1,
    # then the pan correction of -10 applies on x
    assert vp.to_screen(anchor, bounds, SURFACE) == pytest.approx((20.0 - 10.0 + 592.0 * 1.1, 20.0 + 364.0 * 1.1))
