"""Command-line interface for SnipThread."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from snipthread import __version__
from snipthread.config import (
    THREAD_DB_FILE,
    find_project_root,
    get_config_value,
    get_snipthread_dir,
    load_config,
    save_config,
    set_config_value,
)
from snipthread.exceptions import ConfigError, FocusNotFound, GraphError, ResolverFailure
from snipthread.graph.models import NOTE_TYPE
from snipthread.ui.console import Console

console = Console()


def _get_project_root(path: str | None = None) -> Path:
    """Find the project root or error."""
    if path:
        root = Path(path).resolve()
        if not (root / ".snipthread").is_dir():
            console.error(f"No SnipThread project at: {path}. Run 'snipthread init' first.")
            sys.exit(1)
        return root

    root = find_project_root()
    if root is None:
        console.error(
            "No SnipThread project found. Run 'snipthread init' first, "
            "or specify a path with --path."
        )
        sys.exit(1)
    return root


def _open_store(root: Path):
    from snipthread.graph.sqlite_store import SQLiteGraphStore

    return SQLiteGraphStore(get_snipthread_dir(root) / THREAD_DB_FILE)


@click.group()
@click.version_option(version=__version__, prog_name="snipthread")
@click.option("--verbose", "-v", is_flag=True, help="Log store queries and strategy choices.")
def main(verbose: bool):
    """SnipThread - see what led to a thought, what followed, and what resembles it."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--path", "-p", default=None, help="Directory to initialize.")
def init(path: str | None):
    """Create a SnipThread project with an empty snippet store."""
    root = Path(path or ".").resolve()
    if not root.exists():
        console.error(f"Path does not exist: {root}")
        sys.exit(1)

    console.banner()
    console.info(f"Initializing SnipThread in: {root}")

    config = load_config(root)
    config.name = root.name
    config.root_path = str(root)
    save_config(root, config)
    console.success("Configuration saved")

    store = _open_store(root)
    store.stats()  # creates the schema
    store.close()
    console.success("Snippet store ready")


@main.command()
@click.argument("content")
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--type", "snippet_type", default=NOTE_TYPE, help="Snippet type (note, goal, ...).")
@click.option("--cluster", default=None, help="Cluster label.")
@click.option("--timestamp", type=int, default=None, help="Capture time in epoch ms.")
def add(content: str, path: str | None, snippet_type: str, cluster: str | None, timestamp: int | None):
    """Capture a new snippet."""
    root = _get_project_root(path)
    store = _open_store(root)
    try:
        snippet = store.add_snippet(
            content, snippet_type=snippet_type, timestamp=timestamp, cluster_label=cluster
        )
    except GraphError as e:
        console.error(str(e))
        sys.exit(1)
    finally:
        store.close()
    console.success(f"Added snippet #{snippet.id} at t={snippet.timestamp}")


@main.command()
@click.argument("source_id", type=int)
@click.argument("target_id", type=int)
@click.option("--path", "-p", default=None, help="Path to the project root.")
def link(source_id: int, target_id: int, path: str | None):
    """Link two snippets."""
    root = _get_project_root(path)
    store = _open_store(root)
    try:
        store.add_edge(source_id, target_id)
    except GraphError as e:
        console.error(str(e))
        sys.exit(1)
    finally:
        store.close()
    console.success(f"Linked #{source_id} and #{target_id}")


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
def status(path: str | None):
    """Show snippet and edge counts."""
    root = _get_project_root(path)
    store = _open_store(root)
    try:
        stats = store.stats()
    finally:
        store.close()
    console.info(f"Project: {root.name}")
    console.show_stats(stats)


@main.command()
@click.argument("snippet_id", type=int)
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--json", "as_json", is_flag=True, help="Print the thread context as JSON.")
@click.option("--partial", is_flag=True, help="Keep axes that resolved when another fails.")
@click.option("--timeout", type=float, default=None, help="Build deadline in seconds.")
def thread(snippet_id: int, path: str | None, as_json: bool, partial: bool, timeout: float | None):
    """Show the hub-and-spoke thread around a snippet.

    Examples:

        snipthread thread 42

        snipthread thread 42 --json --timeout 2
    """
    from snipthread.thread.engine import ThreadAssembler

    root = _get_project_root(path)
    config = load_config(root)
    store = _open_store(root)
    assembler = ThreadAssembler.from_config(store, config)
    if partial:
        assembler.fail_fast = False

    try:
        context = assembler.build_sync(snippet_id, timeout=timeout)
    except FocusNotFound as e:
        console.error(str(e))
        sys.exit(1)
    except (ResolverFailure, GraphError) as e:
        console.error(f"Could not build thread: {e}")
        sys.exit(1)
    finally:
        store.close()

    if as_json:
        click.echo(json.dumps(context.model_dump(mode="json"), indent=2))
        return

    console.show_thread(context)
    if context.is_partial:
        console.warning("Partial thread: some axes failed to load")


# =========================================================================
# Config Management
# =========================================================================

@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Manage SnipThread configuration.

    Examples:

        snipthread config get budget.max_lateral_nodes

        snipthread config set builder.timeout_seconds 2.5
    """
    root = _get_project_root(path)
    if action == "get" and not key:
        console.error("Usage: snipthread config get <key>")
        sys.exit(1)
    if action == "set" and (not key or value is None):
        console.error("Usage: snipthread config set <key> <value>")
        sys.exit(1)

    try:
        config = load_config(root)
        if action == "show":
            console.console.print_json(json.dumps(config.model_dump(), indent=2))
        elif action == "get":
            console.console.print(f"{key} = {get_config_value(config, key)}")
        else:
            # Numbers, booleans and null arrive as JSON; anything else is a string
            try:
                parsed_value = json.loads(value)
            except json.JSONDecodeError:
                parsed_value = value
            save_config(root, set_config_value(config, key, parsed_value))
            console.success(f"Set {key} = {parsed_value}")
    except KeyError:
        console.error(f"Unknown config key: {key}")
        sys.exit(1)
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
