"""Human-readable rendering of rebase results shared by rebase, retarget and sync."""

import click

from stackyard.cli.core import styled_branch
from stackyard.cli.output import user_output
from stackyard.core.errors import RebaseFailure
from stackyard.core.rebase_coordinator import RebaseResult


def render_rebase_result(branch: str, result: RebaseResult) -> None:
    """Print one result line (plus conflicted files) for the workspace on branch."""
    branch_styled = styled_branch(branch)
    target = result.target_branch

    match result.status:
        case "noop":
            marker = click.style("·", dim=True)
            user_output(f"  {marker} {branch_styled} already up to date with {target}")
        case "rebased":
            marker = click.style("✓", fg="green")
            user_output(f"  {marker} {branch_styled} rebased onto {target}")
        case "conflicts":
            marker = click.style("⚠", fg="yellow")
            user_output(f"  {marker} {branch_styled} rebased onto {target} with conflicts")
            user_output(f"    Conflicted files ({len(result.conflicted_files)}):")
            for path in result.conflicted_files:
                user_output(f"      - {path}")
        case "ignored":
            marker = click.style("…", fg="yellow")
            user_output(f"  {marker} {branch_styled} {result.message}")
        case "failed":
            marker = click.style("✗", fg="red")
            user_output(f"  {marker} {branch_styled} could not be rebased onto {target}")
            if result.message:
                user_output(f"    {result.message}")


def raise_for_failure(branch: str, result: RebaseResult) -> None:
    """Turn a failed or ignored result into a RebaseFailure."""
    if result.status in ("failed", "ignored"):
        raise RebaseFailure(branch, result.target_branch, result.message or "Rebase failed")
