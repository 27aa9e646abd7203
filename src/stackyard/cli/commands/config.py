from dataclasses import replace

import click

from stackyard.cli.config import (
    LoadedConfig,
    read_trunk_from_pyproject,
    save_config,
    write_trunk_to_pyproject,
)
from stackyard.cli.core import discover_repo_context, fail
from stackyard.cli.output import machine_output, user_output
from stackyard.core.context import StackyardContext
from stackyard.core.global_config import GlobalConfig
from stackyard.core.repo_discovery import NoRepoSentinel

GLOBAL_KEYS = ("commit_window", "rebase_on_open", "show_intent")
REPO_KEYS = ("workspaces.dir", "workspaces.default_target")


def _parse_boolean_value(value: str, field_name: str) -> bool:
    """Parse "true" or "false" (case-insensitive), exiting on anything else."""
    if value.lower() not in ("true", "false"):
        fail(f"Invalid boolean value for {field_name}: {value}")
    return value.lower() == "true"


def _update_global_config_field(current: GlobalConfig, field_name: str, value: str) -> GlobalConfig:
    match field_name:
        case "commit_window":
            if not value.isdigit() or int(value) < 1:
                fail(f"Invalid value for commit_window: {value} (expected a positive integer)")
            return replace(current, commit_window=int(value))
        case "rebase_on_open":
            return replace(current, rebase_on_open=_parse_boolean_value(value, field_name))
        case "show_intent":
            return replace(current, show_intent=_parse_boolean_value(value, field_name))
        case _:
            fail(f"Invalid global config field: {field_name}")


def _format_global_value(config: GlobalConfig, key: str) -> str:
    value = getattr(config, key)
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _repo_value(cfg: LoadedConfig, key: str) -> str | None:
    match key:
        case "workspaces.dir":
            return cfg.worktrees_dir
        case "workspaces.default_target":
            return cfg.default_target
        case _:
            return None


@click.group("config")
def config_group() -> None:
    """Manage stackyard configuration."""


@config_group.command("list")
@click.pass_obj
def config_list(ctx: StackyardContext) -> None:
    """Print a list of configuration keys and values."""
    user_output(click.style("Global configuration:", bold=True))
    for key in GLOBAL_KEYS:
        user_output(f"  {key}={_format_global_value(ctx.global_config, key)}")

    user_output(click.style("\nRepository configuration:", bold=True))
    if isinstance(ctx.repo, NoRepoSentinel):
        user_output("  (not in a git repository)")
        return

    trunk_branch = read_trunk_from_pyproject(ctx.repo.root)
    if trunk_branch:
        user_output(f"  trunk-branch={trunk_branch}")
    for key in REPO_KEYS:
        value = _repo_value(ctx.local_config, key)
        if value is not None:
            user_output(f"  {key}={value}")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: StackyardContext, key: str) -> None:
    """Print the value of a given configuration key."""
    if key in GLOBAL_KEYS:
        machine_output(_format_global_value(ctx.global_config, key))
        return

    repo = discover_repo_context(ctx)

    if key == "trunk-branch":
        trunk_branch = read_trunk_from_pyproject(repo.root)
        if trunk_branch:
            machine_output(trunk_branch)
        else:
            user_output("not configured (will auto-detect)")
        return

    if key not in REPO_KEYS:
        fail(f"Invalid key: {key}")

    value = _repo_value(ctx.local_config, key)
    if value is None:
        fail(f"Key not found: {key}")
    machine_output(value)


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: StackyardContext, key: str, value: str) -> None:
    """Update configuration with a value for the given key."""
    if key in GLOBAL_KEYS:
        new_config = _update_global_config_field(ctx.global_config, key, value)
        ctx.config_ops.save(new_config)
        user_output(f"Set {key}={value}")
        return

    repo = discover_repo_context(ctx)

    if key == "trunk-branch":
        if ctx.vcs.get_branch_head(repo.root, value) is None:
            fail(
                f"Branch '{value}' does not exist in repository.\n"
                f"Create the branch first before configuring it as trunk."
            )
        write_trunk_to_pyproject(repo.root, value)
        user_output(f"Set trunk-branch={value}")
        return

    match key:
        case "workspaces.dir":
            updated = replace(ctx.local_config, worktrees_dir=value)
        case "workspaces.default_target":
            updated = replace(ctx.local_config, default_target=value)
        case _:
            fail(f"Invalid key: {key}")

    save_config(repo.state_dir, updated)
    user_output(f"Set {key}={value}")
