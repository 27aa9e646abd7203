import click

from stackyard.cli.core import require_store
from stackyard.cli.json_output import emit_json
from stackyard.cli.output import user_output
from stackyard.core.context import StackyardContext
from stackyard.core.workspace_tree import (
    build_workspace_tree,
    flatten_workspace_tree,
    format_workspace_tree,
)


@click.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output the workspace forest as JSON.")
@click.pass_obj
def list_cmd(ctx: StackyardContext, as_json: bool) -> None:
    """List workspaces as a tree of targets and dependents."""
    store = require_store(ctx)
    roots = build_workspace_tree(store.list_workspaces())

    if as_json:
        emit_json(
            {
                "workspaces": [
                    {
                        "id": node.workspace.id,
                        "branch": node.workspace.branch_name,
                        "target": node.workspace.target_branch,
                        "path": node.workspace.workspace_path,
                        "title": node.workspace.title,
                        "depth": node.depth,
                        "has_conflicts": node.workspace.has_conflicts,
                    }
                    for node in flatten_workspace_tree(roots)
                ]
            }
        )
        return

    user_output(format_workspace_tree(roots, show_intent=ctx.global_config.show_intent))
