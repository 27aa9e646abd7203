import io

import pytest
from rich.console import Console

from stackyard.core.lane_layout import (
    COLLAPSED_GLYPH,
    GraphScene,
    Padding,
    TextLaneRenderer,
    curve_between,
    hit_test,
    layout_lanes,
)
from stackyard.core.lineage import partition_commits
from stackyard.core.workspace_types import WorkspaceChainItem
from tests.test_utils.builders import make_commit

NO_PADDING = Padding(left=0, right=0, top=0, bottom=0)


def _partition():
    commits = [
        make_commit("c4", ["c2"], ["feat"], working_copy=True),
        make_commit("c3", ["c2"], ["main"]),
        make_commit("c2", ["c1"]),
        make_commit("c1"),
    ]
    chain = [WorkspaceChainItem(branch="main", path="", is_target=True)]
    return partition_commits(commits, "feat", chain)


def _positions(geometry, lane: str) -> list[tuple[float, float]]:
    return [(p.x, p.y) for p in geometry.lanes[lane]]


def test_each_lane_is_scaled_to_its_own_length() -> None:
    geometry = layout_lanes(_partition(), width=300, height=40, padding=NO_PADDING)

    assert _positions(geometry, "main") == [
        (pytest.approx(0), pytest.approx(10)),
        (pytest.approx(100), pytest.approx(10)),
        (pytest.approx(200), pytest.approx(10)),
    ]
    assert _positions(geometry, "feat") == [(pytest.approx(0), pytest.approx(20))]


def test_padding_offsets_positions() -> None:
    padding = Padding(left=20, right=80, top=30, bottom=10)
    geometry = layout_lanes(_partition(), width=400, height=80, padding=padding)

    first = geometry.lanes["main"][0]
    assert first.x == pytest.approx(20)
    assert first.y == pytest.approx(30 + 1 * 40 / 4)


def test_one_curve_per_connector() -> None:
    geometry = layout_lanes(_partition(), width=300, height=40, padding=NO_PADDING)

    assert len(geometry.curves) == 1
    curve = geometry.curves[0]
    assert curve.start == (pytest.approx(100), pytest.approx(10))
    assert curve.end == (pytest.approx(0), pytest.approx(20))


def test_curvature_is_bounded() -> None:
    control1, control2 = curve_between((0.0, 0.0), (400.0, 50.0), max_curvature=60.0)

    assert control1 == (60.0, 0.0)
    assert control2 == (340.0, 50.0)


def test_short_curves_pull_half_the_distance() -> None:
    control1, control2 = curve_between((0.0, 0.0), (40.0, 10.0), max_curvature=60.0)

    assert control1 == (20.0, 0.0)
    assert control2 == (20.0, 10.0)


def test_hit_test_finds_nearest_node_within_radius() -> None:
    geometry = layout_lanes(_partition(), width=300, height=40, padding=NO_PADDING)

    hit = hit_test(geometry, 102, 11)
    assert hit is not None
    assert hit.node.commit.id == "c2"

    assert hit_test(geometry, 150, 30) is None


def test_text_renderer_draws_lanes_and_connectors() -> None:
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    geometry = layout_lanes(_partition(), width=40, height=4, padding=NO_PADDING)

    TextLaneRenderer(console).render(GraphScene(geometry=geometry, highlighted_node_id="c3"))

    output = buffer.getvalue()
    lines = output.splitlines()
    assert lines[0].rstrip().endswith("main")
    assert lines[1].rstrip().endswith("feat")
    assert "◉" in lines[0]
    assert "@" in lines[1]
    assert "c2 ─╮ c4" in output


def test_text_renderer_marks_commits_sharing_a_column() -> None:
    # Twelve target commits squeezed into four columns
    target = [make_commit(f"c{i}", [f"c{i - 1}"] if i > 1 else []) for i in range(1, 12)]
    target.append(make_commit("c12", ["c11"], ["main"]))
    head = make_commit("w1", ["c12"], ["feat"], working_copy=True)
    chain = [WorkspaceChainItem(branch="main", path="", is_target=True)]
    partition = partition_commits([head, *reversed(target)], "feat", chain)
    geometry = layout_lanes(partition, width=4, height=4, padding=NO_PADDING)
    buffer = io.StringIO()

    TextLaneRenderer(Console(file=buffer, width=80, color_system=None)).render(
        GraphScene(geometry=geometry)
    )

    lines = buffer.getvalue().splitlines()
    assert lines[0].startswith(COLLAPSED_GLYPH * 4)
    assert "main  (+8 collapsed)" in lines[0]
    assert "collapsed" not in lines[1]
    assert lines[1].startswith("@")
