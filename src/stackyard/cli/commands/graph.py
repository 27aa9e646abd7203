"""Graph command - lane view of a workspace's commits against its target."""

import click
from pydantic import BaseModel, ConfigDict
from rich.console import Console

from stackyard.cli.core import discover_repo_context, fail, require_store, resolve_workspace
from stackyard.cli.json_output import emit_json, emit_json_error
from stackyard.cli.output import user_output
from stackyard.cli.rendering import render_rebase_result
from stackyard.core.commit_graph import CommitGraphLoader, GraphViewState
from stackyard.core.context import StackyardContext
from stackyard.core.lane_layout import (
    LANE_ROWS,
    GraphScene,
    LaneGeometry,
    Padding,
    TextLaneRenderer,
    hit_test,
    layout_lanes,
)
from stackyard.core.lineage import LanePartition
from stackyard.core.workspace_types import Workspace, WorkspaceChainItem

TEXT_PADDING = Padding(left=0, right=1, top=0, bottom=0)
DEFAULT_JSON_WIDTH = 800
DEFAULT_JSON_HEIGHT = 200


class ChainItemModel(BaseModel):
    model_config = ConfigDict(strict=True)

    branch: str
    path: str | None
    is_target: bool


class GraphNodeModel(BaseModel):
    model_config = ConfigDict(strict=True)

    id: str
    short_id: str
    lane: str
    lane_offset: int
    sequence_index: int
    x: float
    y: float
    bookmarks: list[str]
    is_working_copy: bool
    description: str


class GraphConnectorModel(BaseModel):
    """A cubic curve from source to dest via two control points."""

    model_config = ConfigDict(strict=True)

    source: str
    dest: str
    start: tuple[float, float]
    control1: tuple[float, float]
    control2: tuple[float, float]
    end: tuple[float, float]


class GraphResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    workspace: str
    target_branch: str | None
    chain: list[ChainItemModel]
    target_head_found: bool
    truncated: bool
    dropped_count: int
    width: float
    height: float
    highlighted: str | None
    nodes: list[GraphNodeModel]
    connectors: list[GraphConnectorModel]


def build_graph_response(
    workspace: Workspace,
    chain: list[WorkspaceChainItem],
    partition: LanePartition,
    scene: GraphScene,
) -> GraphResponse:
    geometry = scene.geometry
    nodes = [
        GraphNodeModel(
            id=placed.node.commit.id,
            short_id=placed.node.commit.short_id,
            lane=placed.node.lane,
            lane_offset=placed.node.lane_offset,
            sequence_index=placed.node.sequence_index,
            x=float(placed.x),
            y=float(placed.y),
            bookmarks=list(placed.node.commit.bookmarks),
            is_working_copy=placed.node.commit.is_working_copy,
            description=placed.node.commit.description,
        )
        for lane_nodes in geometry.lanes.values()
        for placed in lane_nodes
    ]
    connectors = [
        GraphConnectorModel(
            source=curve.connection.source.commit.id,
            dest=curve.connection.dest.commit.id,
            start=_point(curve.start),
            control1=_point(curve.control1),
            control2=_point(curve.control2),
            end=_point(curve.end),
        )
        for curve in geometry.curves
    ]
    return GraphResponse(
        workspace=workspace.branch_name,
        target_branch=partition.target_branch,
        chain=[
            ChainItemModel(branch=item.branch, path=item.path or None, is_target=item.is_target)
            for item in chain
        ],
        target_head_found=partition.target_head_found,
        truncated=partition.truncated,
        dropped_count=partition.dropped_count,
        width=float(geometry.width),
        height=float(geometry.height),
        highlighted=scene.highlighted_node_id,
        nodes=nodes,
        connectors=connectors,
    )


def _point(point: tuple[float, float]) -> tuple[float, float]:
    return (float(point[0]), float(point[1]))


def _find_commit(partition: LanePartition, prefix: str) -> str | None:
    for node in partition.nodes:
        if node.commit.id.startswith(prefix) or node.commit.short_id == prefix:
            return node.commit.id
    return None


def _highlight(
    partition: LanePartition,
    geometry: LaneGeometry,
    commit: str | None,
    at: tuple[float, float] | None,
) -> str | None:
    if commit is not None:
        return _find_commit(partition, commit)
    if at is not None:
        placed = hit_test(geometry, at[0], at[1])
        return placed.node.commit.id if placed is not None else None
    return None


@click.command("graph")
@click.argument("name", metavar="WORKSPACE", required=False)
@click.option(
    "-n",
    "--window",
    type=click.IntRange(min=1),
    default=None,
    help="Number of commits to show (default: commit_window from global config).",
)
@click.option("--width", type=click.IntRange(min=1), default=None, help="Drawing width.")
@click.option("--height", type=click.IntRange(min=1), default=None, help="Drawing height.")
@click.option(
    "--highlight", "commit", type=str, default=None, help="Commit id (or prefix) to highlight."
)
@click.option(
    "--at",
    type=(float, float),
    default=None,
    help="Highlight the commit nearest to the point X Y in drawing coordinates.",
)
@click.option(
    "--json", "as_json", is_flag=True, help="Output lanes, connectors and geometry as JSON."
)
@click.pass_obj
def graph_cmd(
    ctx: StackyardContext,
    name: str | None,
    window: int | None,
    width: int | None,
    height: int | None,
    commit: str | None,
    at: tuple[float, float] | None,
    as_json: bool,
) -> None:
    """Show WORKSPACE's commits in lanes next to its target branch.

    Target-branch history runs along the upper lane, the workspace's own
    commits along the lower one; curves mark where the workspace diverged.
    """
    repo = discover_repo_context(ctx)
    store = require_store(ctx)
    workspace = resolve_workspace(ctx, name)

    if ctx.global_config.rebase_on_open and workspace.target_branch:
        coordinator = ctx.rebase_coordinator
        if coordinator is not None:
            result = coordinator.check_and_rebase(
                repo.root, workspace.id, workspace.target_branch, force=False
            )
            if result.status != "noop":
                render_rebase_result(workspace.branch_name, result)
            workspace = store.get_workspace(workspace.id) or workspace

    loader = CommitGraphLoader(ctx.vcs, window or ctx.global_config.commit_window)
    state = GraphViewState()
    loaded = loader.refresh(state, workspace, store.list_workspaces())

    if not loaded.ok or loaded.partition is None:
        message = loaded.error or "Failed to load commit graph"
        if as_json:
            emit_json_error(message, "GraphLoadError")
        fail(message)

    partition = loaded.partition
    if as_json:
        padding = Padding()
        draw_width = width or DEFAULT_JSON_WIDTH
        draw_height = height or DEFAULT_JSON_HEIGHT
    else:
        padding = TEXT_PADDING
        draw_width = width or max(Console(stderr=True).width - 24, 10)
        draw_height = height or LANE_ROWS

    geometry = layout_lanes(partition, draw_width, draw_height, padding)
    state.hovered_node_id = _highlight(partition, geometry, commit, at)
    scene = GraphScene(geometry=geometry, highlighted_node_id=state.hovered_node_id)

    if as_json:
        response = build_graph_response(workspace, loaded.chain, partition, scene)
        emit_json(response)
        return

    path = " → ".join([*(item.branch for item in loaded.chain), workspace.branch_name])
    user_output(click.style(path, bold=True))
    if not partition.target_head_found and partition.target_branch is not None:
        user_output(
            click.style(
                f"  {partition.target_branch} is outside the window; lanes follow bookmarks only",
                dim=True,
            )
        )

    TextLaneRenderer(Console(stderr=True)).render(scene)

    if partition.truncated:
        dropped = partition.dropped_count
        user_output(click.style(f"  … {dropped} older commit(s) not shown", dim=True))
