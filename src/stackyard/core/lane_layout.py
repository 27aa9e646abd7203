"""Map lanes and connectors to drawable coordinates.

Every renderer (terminal, image, GUI) places nodes with the same formula so the
layout is reproducible across surfaces:

    x = padding.left + sequence_index * draw_width / (lane_max_index + 1)
    y = padding.top + lane_offset * draw_height / 4

Each lane is scaled to its own maximum sequence index. Lanes are NOT on a
shared scale: a two-commit workspace lane spans the same width as a
forty-commit target lane.

Connectors are cubic curves between two placed nodes. The control points are
pulled horizontally by min(|dx| * CURVATURE_RATIO, max_curvature).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from rich.console import Console
from rich.text import Text

from stackyard.core.lineage import ChartCommitNode, LaneConnection, LanePartition

CURVATURE_RATIO = 0.5
LANE_ROWS = 4
COLLAPSED_GLYPH = "≡"


@dataclass(frozen=True)
class Padding:
    left: float = 20
    right: float = 180
    top: float = 30
    bottom: float = 30


@dataclass(frozen=True)
class PlacedNode:
    x: float
    y: float
    node: ChartCommitNode


@dataclass(frozen=True)
class CurveGeometry:
    """Cubic curve from start to end through two control points."""

    start: tuple[float, float]
    control1: tuple[float, float]
    control2: tuple[float, float]
    end: tuple[float, float]
    connection: LaneConnection


@dataclass(frozen=True)
class LaneGeometry:
    width: float
    height: float
    lanes: dict[str, list[PlacedNode]]
    curves: list[CurveGeometry]


@dataclass(frozen=True)
class GraphScene:
    """Everything a renderer needs: geometry plus the highlighted node, if any."""

    geometry: LaneGeometry
    highlighted_node_id: str | None = None


def lane_scale(lane_nodes: list[ChartCommitNode], draw_width: float) -> float:
    """Horizontal distance between consecutive nodes of one lane."""
    max_index = max((n.sequence_index for n in lane_nodes), default=0)
    return draw_width / (max_index + 1)


def curve_between(
    start: tuple[float, float],
    end: tuple[float, float],
    max_curvature: float,
) -> tuple[tuple[float, float], tuple[float, float]]:
    """Control points for a smooth curve whose bend is bounded by max_curvature."""
    pull = min(abs(end[0] - start[0]) * CURVATURE_RATIO, max_curvature)
    return (start[0] + pull, start[1]), (end[0] - pull, end[1])


def layout_lanes(
    partition: LanePartition,
    width: float,
    height: float,
    padding: Padding | None = None,
    max_curvature: float = 60.0,
) -> LaneGeometry:
    """Place every node of the partition and build connector curves.

    Args:
        partition: Output of partition_commits
        width: Total drawing surface width
        height: Total drawing surface height
        padding: Margins around the drawable area
        max_curvature: Upper bound on how far curve control points are pulled

    Returns:
        LaneGeometry with placed nodes per lane and one curve per connector
    """
    if padding is None:
        padding = Padding()

    draw_width = max(width - padding.left - padding.right, 0)
    draw_height = max(height - padding.top - padding.bottom, 0)
    y_scale = draw_height / LANE_ROWS

    placed_by_id: dict[str, PlacedNode] = {}
    lanes: dict[str, list[PlacedNode]] = {}
    for lane_name, lane_nodes in partition.lanes.items():
        x_scale = lane_scale(lane_nodes, draw_width)
        placed_lane = []
        for node in lane_nodes:
            placed = PlacedNode(
                x=padding.left + node.sequence_index * x_scale,
                y=padding.top + node.lane_offset * y_scale,
                node=node,
            )
            placed_lane.append(placed)
            placed_by_id[node.commit.id] = placed
        lanes[lane_name] = placed_lane

    curves = []
    for connection in partition.connectors:
        source = placed_by_id.get(connection.source.commit.id)
        dest = placed_by_id.get(connection.dest.commit.id)
        if source is None or dest is None:
            continue
        start = (source.x, source.y)
        end = (dest.x, dest.y)
        control1, control2 = curve_between(start, end, max_curvature)
        curves.append(
            CurveGeometry(
                start=start, control1=control1, control2=control2, end=end, connection=connection
            )
        )

    return LaneGeometry(width=width, height=height, lanes=lanes, curves=curves)


def hit_test(geometry: LaneGeometry, x: float, y: float, radius: float = 8.0) -> PlacedNode | None:
    """Return the placed node nearest to (x, y) within radius, if any."""
    best: PlacedNode | None = None
    best_distance = radius * radius
    for lane_nodes in geometry.lanes.values():
        for placed in lane_nodes:
            distance = (placed.x - x) ** 2 + (placed.y - y) ** 2
            if distance <= best_distance:
                best = placed
                best_distance = distance
    return best


class LaneRenderer(ABC):
    """Surface-specific drawing of a GraphScene."""

    @abstractmethod
    def render(self, scene: GraphScene) -> None: ...


class TextLaneRenderer(LaneRenderer):
    """Render lanes to a terminal with rich.

    The drawable width is interpreted as a column count; each lane is printed
    on its own row using the shared per-lane x formula, followed by a legend
    listing the divergence points. Commits that round to the same column are
    drawn as one COLLAPSED_GLYPH and counted at the end of the lane's row.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console if console is not None else Console()

    def render(self, scene: GraphScene) -> None:
        geometry = scene.geometry
        columns = max(int(geometry.width), 1)

        for lane_name, placed_nodes in sorted(
            geometry.lanes.items(), key=lambda item: _lane_row(item[1])
        ):
            by_column: dict[int, list[PlacedNode]] = {}
            for placed in placed_nodes:
                col = min(int(round(placed.x)), columns - 1)
                by_column.setdefault(col, []).append(placed)

            row = [" "] * columns
            styles: dict[int, str] = {}
            collapsed = 0
            for col, stacked in by_column.items():
                collapsed += len(stacked) - 1
                glyph, style = _glyph(stacked, scene.highlighted_node_id)
                row[col] = glyph
                if style is not None:
                    styles[col] = style

            line = Text()
            for col, char in enumerate(row):
                line.append(char, style=styles.get(col))
            line.append(f"  {lane_name}", style="cyan")
            if collapsed:
                line.append(f"  (+{collapsed} collapsed)", style="dim")
            self._console.print(line)

        for curve in geometry.curves:
            source = curve.connection.source.commit
            dest = curve.connection.dest.commit
            self._console.print(
                Text(f"  {source.short_id} ─╮ {dest.short_id}", style="dim"),
            )


def _glyph(stacked: list[PlacedNode], highlighted_node_id: str | None) -> tuple[str, str | None]:
    # Highlight and working copy stay visible even inside a collapsed column
    commits = [placed.node.commit for placed in stacked]
    if any(commit.id == highlighted_node_id for commit in commits):
        return "◉", "bold yellow"
    if any(commit.is_working_copy for commit in commits):
        return "@", "bold green"
    if len(commits) > 1:
        return COLLAPSED_GLYPH, "dim"
    return ("●" if commits[0].bookmarks else "○"), None


def _lane_row(placed_nodes: list[PlacedNode]) -> float:
    if not placed_nodes:
        return float("inf")
    return placed_nodes[0].y
