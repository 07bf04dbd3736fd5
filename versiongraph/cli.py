"""
Version Graph CLI
=================

Inspect the lineage graph of a seeded rubric history from the terminal.

Usage:
    python -m versiongraph.cli graph --search safety --format mermaid
    python -m versiongraph.cli merge v1.2-communication v1.3-merge
    python -m versiongraph.cli verify
"""

import argparse
import json
import sys
from typing import List, Optional

from .api.mapper import map_entry, map_error, map_snapshot
from .contracts.graph import GraphSnapshot
from .engine import VersionGraphEngine
from .fixtures import individual_criteria_seed, rubric_history_seed
from .graph.mermaid import render_mermaid

SEEDS = {
    "overall": rubric_history_seed,
    "criteria": individual_criteria_seed,
}


def _engine(args) -> VersionGraphEngine:
    engine = VersionGraphEngine(history=SEEDS[args.seed]())
    if args.search or args.action:
        engine.set_filter(search_term=args.search, action_filter=args.action)
    return engine


def _print_snapshot(snapshot: GraphSnapshot, fmt: str):
    if fmt == "json":
        print(json.dumps(map_snapshot(snapshot), indent=2, ensure_ascii=False))
    elif fmt == "mermaid":
        print(render_mermaid(snapshot))
    else:
        print("| Node | Level | x | y | Action |")
        print("| :--- | ---: | ---: | ---: | :--- |")
        for node in snapshot.nodes:
            print(f"| `{node.node_id}` | {node.level} | {node.position.x:g} | "
                  f"{node.position.y:g} | {node.action} |")
        print()
        print("| Edge | Kind |")
        print("| :--- | :--- |")
        for edge in snapshot.edges:
            print(f"| `{edge.source_id}` -> `{edge.target_id}` | {edge.kind.value} |")


def cmd_graph(args) -> int:
    engine = _engine(args)
    _print_snapshot(engine.snapshot, args.format)
    return 0


def cmd_history(args) -> int:
    engine = _engine(args)
    print(json.dumps([map_entry(e) for e in engine.visible_history], indent=2, ensure_ascii=False))
    return 0


def cmd_merge(args) -> int:
    engine = _engine(args)
    result = engine.request_merge(args.ids)
    if result.is_failure:
        print(f"[!] Merge rejected: {result.error.message}", file=sys.stderr)
        print(json.dumps(map_error(result.error), indent=2), file=sys.stderr)
        return 1

    print(f"[+] Appended {result.value.id} ({result.value.version})", file=sys.stderr)
    _print_snapshot(engine.snapshot, args.format)
    return 0


def cmd_verify(args) -> int:
    engine = _engine(args)
    valid, error = engine.store.verify_lineage()
    report = engine.topology().report()

    print(f"[*] Entries: {len(engine.history)}")
    print(f"[*] Nodes: {report.node_count}  Edges: {report.edge_count}  Roots: {report.root_count}")
    print(f"[*] DAG: {report.is_dag}  Lineage forest: {report.lineage_is_forest}")
    if not valid:
        print(f"[!] {error.message}")
        return 1
    if not (report.is_dag and report.lineage_is_forest):
        print("[!] Structural check failed")
        return 1
    print("[+] Lineage verified.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Rubric version graph inspector")
    parser.add_argument("--seed", choices=sorted(SEEDS), default="overall",
                        help="Which sample history to load")
    parser.add_argument("--search", default=None, help="Search modifier, field or comment")
    parser.add_argument("--action", default=None, help="Action filter (all, created, modified, ...)")

    subparsers = parser.add_subparsers(dest="command")

    graph_parser = subparsers.add_parser("graph", help="Print the lineage graph")
    graph_parser.add_argument("--format", choices=("table", "json", "mermaid"), default="table")

    subparsers.add_parser("history", help="Print the (filtered) history")

    merge_parser = subparsers.add_parser("merge", help="Merge versions and print the graph")
    merge_parser.add_argument("ids", nargs="*", help="Entry ids to merge")
    merge_parser.add_argument("--format", choices=("table", "json", "mermaid"), default="table")

    subparsers.add_parser("verify", help="Check lineage and DAG structure")

    args = parser.parse_args(argv)

    try:
        if args.command == "graph":
            return cmd_graph(args)
        elif args.command == "history":
            return cmd_history(args)
        elif args.command == "merge":
            return cmd_merge(args)
        elif args.command == "verify":
            return cmd_verify(args)
    except ValueError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
