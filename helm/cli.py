"""Rich CLI for growing and pruning Helm trees."""

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Optional

import anthropic
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.tree import Tree as RichTree

from helm.agents import AgentResult
from helm.core.errors import HelmError
from helm.core.models import Tree
from helm.generators import make_assistant, make_generator
from helm.io.persistence import load_tree, save_tree, tree_path
from helm.io.unroll import unroll_branches, unroll_tree
from helm.orchestrator import Orchestrator
from helm.profiles import Profile, load_profile


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Helm CLI - grow branching text with autonomous agents")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Create a tree")
    new.add_argument("name", help="Tree name (also its id)")
    new.add_argument("-s", "--seed", default="", help="Seed text of the root node")
    new.add_argument("-d", "--trees-dir", default="trees", help="Trees directory")

    show = sub.add_parser("show", help="Print a tree")
    show.add_argument("tree", help="Path to tree.json")

    run = sub.add_parser("run", help="Run an agent on a tree and save it")
    run.add_argument("tree", help="Path to tree.json")
    run.add_argument("-p", "--profile", required=True, help="TOML profile with models and agents")
    run.add_argument("-a", "--agent", required=True, help="Agent name from the profile")
    run.add_argument("-n", "--node", help="Start node id (default: current node)")

    merge = sub.add_parser("merge", help="Collapse single-child chains and save")
    merge.add_argument("tree", help="Path to tree.json")

    unroll = sub.add_parser("unroll", help="Export a tree as text")
    unroll.add_argument("tree", help="Path to tree.json")
    unroll.add_argument("--branches", action="store_true", help="One entry per root-to-leaf branch")
    unroll.add_argument("-o", "--output", help="Write to this file instead of stdout")

    extract = sub.add_parser("extract", help="Copy a subtree into a new tree")
    extract.add_argument("tree", help="Path to tree.json")
    extract.add_argument("node", help="Node id that becomes the new root")
    extract.add_argument("name", help="Name (and id) of the new tree")
    extract.add_argument("-d", "--trees-dir", default="trees", help="Trees directory")

    return parser.parse_args(argv)


def configure_logging(console: Console, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def render_tree(console: Console, tree: Tree) -> None:
    def label(node_id: str) -> str:
        node = tree.nodes[node_id]
        text = node.text[:60].replace("\n", " ") or "(empty)"
        marks = ""
        if node_id == tree.current_node_id:
            marks += " [bold cyan]◀ current[/bold cyan]"
        if node_id in tree.bookmarked_node_ids:
            marks += " [yellow]★[/yellow]"
        return f"[dim]{node_id}[/dim] {text}{marks}"

    root = RichTree(label(tree.root_id))
    stack = [(root, tree.root_id)]
    while stack:
        branch, node_id = stack.pop()
        for child_id in tree.nodes[node_id].child_ids:
            stack.append((branch.add(label(child_id)), child_id))
    console.print(root)


def create_tree(args: argparse.Namespace, console: Console) -> None:
    tree = Tree.create(args.name, seed_text=args.seed)
    path = tree_path(args.trees_dir, tree.id)
    if path.exists():
        raise HelmError(f"A tree named {args.name!r} already exists")
    save_tree(tree, path)
    console.print(f"Created {path}")


def extract_tree(args: argparse.Namespace, console: Console) -> None:
    source = load_tree(args.tree)
    tree = source.extract_subtree(args.node, args.name)
    path = tree_path(args.trees_dir, tree.id)
    if path.exists():
        raise HelmError(f"A tree named {args.name!r} already exists")
    save_tree(tree, path)
    console.print(f"Extracted {len(tree.nodes)} nodes into {path}")


def run_agent(args: argparse.Namespace, console: Console) -> AgentResult:
    profile: Profile = load_profile(Path(args.profile))
    config = profile.agent(args.agent)
    if config is None:
        raise HelmError(f"No agent named {args.agent!r} in {args.profile}")

    tree = load_tree(args.tree)
    client = anthropic.AsyncAnthropic()
    orchestrator = Orchestrator(
        tree=tree,
        generator=make_generator(profile.session.continuations, client, profile.session),
        assistant=make_assistant(profile.session.assistant, client, profile.session),
        config=profile.session,
    )

    console.print(Panel(f"{config.type} {config.name!r} on tree {tree.name!r}", title="Helm Agent"))
    try:
        result = asyncio.run(
            orchestrator.start_agent(config, node_id=args.node, sink=lambda line: console.print(f"  {line}"))
        )
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted; saving what was grown so far.[/yellow]")
        orchestrator.tree.clear_locks()
        save_tree(orchestrator.tree, args.tree)
        raise SystemExit(130)

    save_tree(orchestrator.tree, args.tree)
    console.print(f"Finished with status [bold]{result.status}[/bold]; final node {result.final_node_id}")
    return result


def main(argv: Optional[list[str]] = None) -> None:
    console = Console()
    args = parse_args(argv)
    configure_logging(console, args.verbose)

    try:
        if args.command == "new":
            create_tree(args, console)
        elif args.command == "show":
            render_tree(console, load_tree(args.tree))
        elif args.command == "run":
            run_agent(args, console)
        elif args.command == "merge":
            tree = load_tree(args.tree)
            merged = tree.mass_merge()
            save_tree(tree, args.tree)
            console.print(f"Merged {merged} nodes")
        elif args.command == "extract":
            extract_tree(args, console)
        elif args.command == "unroll":
            tree = load_tree(args.tree)
            text = unroll_branches(tree) if args.branches else unroll_tree(tree)
            if args.output:
                Path(args.output).write_text(text, encoding="utf-8")
                console.print(f"Wrote {args.output}")
            else:
                console.print(text, markup=False, highlight=False)
    except HelmError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
