from notegraph.layout.engine import LayoutParams
from notegraph.vault.graph import build_graph
from notegraph.vault.loader import load_graph
from notegraph.view.controller import (
    DocumentsChanged,
    InteractionController,
    InteractionState,
    PointerMoved,
    PointerPressed,
    PointerReleased,
    Scrolled,
    SelectionChanged,
    Tick,
)
from notegraph.view.scene import Circle
from notegraph.view.viewport import Rect, Viewport, graph_bounds

SURFACE = Rect(0, 0, 800, 600)


def _controller(links=None, **kwargs) -> InteractionController:
    graph, _ = build_graph(links or {"a": ["b"], "b": [], "c": []})
    return InteractionController(graph, SURFACE, **kwargs)


def _screen_of(controller: InteractionController, idx: int):
    positions = controller.engine.get_positions()
    return controller.viewport.to_screen(positions[idx], graph_bounds(positions), controller.surface)


def test_press_on_node_selects_it_and_starts_drag() -> None:
    controller = _controller()
    seen: list[SelectionChanged] = []
    controller.on_selection(seen.append)

    change = controller.handle(PointerPressed(_screen_of(controller, 1)))

    assert change == SelectionChanged(node=1, name="b")
    assert seen == [change]
    assert controller.active == 1
    assert controller.active_name == "b"
    assert controller.state == InteractionState.DRAGGING


def test_press_on_empty_space_clears_selection() -> None:
    controller = _controller(viewport=Viewport(pick_threshold=1e-9))
    controller.active = 0
    change = controller.handle(PointerPressed((-5000.0, -5000.0)))
    assert change == SelectionChanged(node=None, name=None)
    assert controller.active is None
    assert controller.state == InteractionState.DRAGGING


def test_drag_pans_by_pointer_delta() -> None:
    controller = _controller()
    controller.handle(PointerPressed((100.0, 100.0)))
    controller.handle(PointerMoved((110.0, 95.0)))
    controller.handle(PointerMoved((120.0, 95.0)))
    assert (controller.viewport.pan_x, controller.viewport.pan_y) == (20.0, -5.0)

    controller.handle(PointerReleased((120.0, 95.0)))
    assert controller.state == InteractionState.IDLE
    controller.handle(PointerMoved((300.0, 300.0)))
    assert (controller.viewport.pan_x, controller.viewport.pan_y) == (20.0, -5.0)


def test_other_buttons_are_ignored() -> None:
    controller = _controller()
    assert controller.handle(PointerPressed(_screen_of(controller, 0), button="right")) is None
    assert controller.state == InteractionState.IDLE
    assert controller.active is None


def test_scroll_zooms_and_caps() -> None:
    controller = _controller(viewport=Viewport(max_zoom=2.0))
    for _ in range(20):
        controller.handle(Scrolled((400.0, 300.0), 5.0))
    assert controller.viewport.zoom == 2.0


def test_tick_steps_layout_and_advances_highlight() -> None:
    controller = _controller(layout_params=LayoutParams(max_steps=2))
    start = controller.engine.get_positions()
    controller.handle(Tick())
    assert controller.engine.step_count == 1
    assert controller.engine.get_positions() != start
    assert controller.fraction > 0.0

    for _ in range(200):
        controller.handle(Tick())
    assert controller.engine.step_count == 2
    assert 0.0 <= controller.fraction < 1.0


def test_selection_does_not_restart_settled_layout() -> None:
    controller = _controller(layout_params=LayoutParams(max_steps=1))
    controller.handle(Tick())
    settled = controller.engine.get_positions()
    controller.handle(PointerPressed(_screen_of(controller, 0)))
    controller.handle(PointerReleased((0.0, 0.0)))
    controller.handle(Tick())
    assert controller.engine.get_positions() == settled


def test_frame_highlights_active_neighbourhood() -> None:
    controller = _controller()
    palette = controller.settings.palette
    controller.handle(PointerPressed(_screen_of(controller, 0)))

    circles = [p for p in controller.frame() if isinstance(p, Circle)]
    node_colors = [c.color for c in circles if c.color != palette.success]
    assert node_colors == [palette.text, palette.text, palette.primary]
    assert sum(1 for c in circles if c.color == palette.success) == 1


def test_documents_changed_rebuilds_and_keeps_positions(make_vault) -> None:
    root = make_vault({"a.md": "[[b]]", "b.md": ""})
    graph, _ = load_graph(root)
    controller = InteractionController(graph, SURFACE, rebuild=lambda: load_graph(root))
    reports = []
    controller.on_rebuild(reports.append)

    controller.handle(PointerPressed(_screen_of(controller, 0)))
    controller.handle(PointerReleased((0.0, 0.0)))
    for _ in range(3):
        controller.handle(Tick())
    before = dict(zip(controller.graph.identifiers(), controller.engine.get_positions()))

    (root / "c.md").write_text("[[a]] [[missing]]", encoding="utf-8")
    controller.handle(DocumentsChanged(paths=(root / "c.md",)))

    assert len(controller.graph) == 3
    assert controller.engine.step_count == 0
    after = dict(zip(controller.graph.identifiers(), controller.engine.get_positions()))
    assert after["a"] == before["a"]
    assert after["b"] == before["b"]
    assert controller.active_name == "a"
    assert len(reports) == 1
    assert len(reports[0]) == 1


def test_rebuild_drops_selection_of_removed_note(make_vault) -> None:
    root = make_vault({"a.md": "[[b]]", "b.md": ""})
    graph, _ = load_graph(root)
    controller = InteractionController(graph, SURFACE, rebuild=lambda: load_graph(root))
    controller.handle(PointerPressed(_screen_of(controller, 1)))
    assert controller.active_name == "b"

    (root / "b.md").unlink()
    controller.handle(DocumentsChanged())
    assert controller.active is None
    assert controller.graph.names == ["a"]


def test_failed_rebuild_keeps_previous_graph(make_vault) -> None:
    root = make_vault({"a.md": ""})
    graph, _ = load_graph(root)
    controller = InteractionController(graph, SURFACE, rebuild=lambda: load_graph(root))

    (root / "a.md").unlink()
    controller.handle(DocumentsChanged())
    assert controller.graph is graph
