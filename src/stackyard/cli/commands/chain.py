import click

from stackyard.cli.core import fail, require_store, resolve_workspace, styled_branch
from stackyard.cli.json_output import emit_json
from stackyard.cli.output import user_output
from stackyard.core.chain_resolver import build_chain
from stackyard.core.context import StackyardContext
from stackyard.core.errors import CycleDetectedError


@click.command("chain")
@click.argument("name", metavar="WORKSPACE", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output the chain as JSON.")
@click.pass_obj
def chain_cmd(ctx: StackyardContext, name: str | None, as_json: bool) -> None:
    """Show the stack of targets from the root branch down to WORKSPACE.

    Defaults to the workspace containing the current directory.
    """
    store = require_store(ctx)
    workspace = resolve_workspace(ctx, name)

    try:
        chain = build_chain(workspace, store.list_workspaces())
    except CycleDetectedError as e:
        fail(str(e))

    if as_json:
        emit_json(
            {
                "workspace": workspace.branch_name,
                "chain": [
                    {"branch": item.branch, "path": item.path or None, "is_target": item.is_target}
                    for item in chain
                ],
            }
        )
        return

    for depth, item in enumerate(chain):
        indent = "  " * depth
        if item.is_target:
            user_output(f"{indent}{item.branch} {click.style('(branch)', dim=True)}")
        else:
            user_output(f"{indent}{item.branch} {click.style(item.path, dim=True)}")
    indent = "  " * len(chain)
    user_output(f"{indent}{styled_branch(workspace.branch_name)} ◀")
