#!/usr/bin/env python3
"""
Render a sample organisation chart to SVG.

The sample is a reporting tree: people manage people, and teams sit at
the leaves. The tree is flattened into top-level nodes plus one link per
reporting line, laid out, and written to ./build/.

Usage:
    uv run python scripts/orgchart_demo.py [--focus NAME] [--size 1200x900] [--seed 1]

Examples:
    uv run python scripts/orgchart_demo.py
    uv run python scripts/orgchart_demo.py --focus "Anu Sankar"
"""

from __future__ import annotations

import argparse
import re
from pathlib import Path
from typing import Any, Optional

from orgchart_layout import (
    Link,
    ManualHost,
    OrgChart,
    PersonNode,
    TeamNode,
    layout_quality_summary,
)

BUILD_DIR = Path(__file__).parent.parent / "build"

ORGANISATION: dict[str, Any] = {
    "name": "Magnus Vejlstrup",
    "children": [
        {
            "team": "Technical Coordination",
            "members": ["Hugo Firth", "Tobias Johansson"],
        },
        {
            "name": "Frederik Clementson",
            "children": [
                {
                    "name": "Irfan Karaca",
                    "children": [
                        {
                            "team": "Console",
                            "members": [
                                "Rex Greenway",
                                "Elliot Jalgard",
                                "Anu Sankar",
                                "Johanna Gustafson",
                                "Bryce Samspson",
                            ],
                        },
                        {
                            "team": "UBS",
                            "members": ["Max Bautzer", "Alexander Ivankin", "Miguel Rodriguez"],
                        },
                    ],
                },
                {"name": "Sofia Lindqvist"},
                {"name": "Daniel Okafor"},
            ],
        },
        {
            "name": "Priya Raman",
            "children": [
                {"team": "Data Platform", "members": ["Lena Hoffmann", "Tom Berg"]},
                {"name": "Kasper Holm"},
            ],
        },
    ],
}


def slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def flatten(
    tree: dict[str, Any],
    parent: Optional[str] = None,
    nodes: Optional[list] = None,
    links: Optional[list[Link]] = None,
) -> tuple[list, list[Link]]:
    """Flatten the reporting tree into top-level nodes and reporting links."""
    nodes = [] if nodes is None else nodes
    links = [] if links is None else links

    if "team" in tree:
        node_id = f"team-{slug(tree['team'])}"
        members = [PersonNode(slug(m), m) for m in tree.get("members", [])]
        nodes.append(TeamNode(node_id, tree["team"], members))
    else:
        node_id = slug(tree["name"])
        nodes.append(PersonNode(node_id, tree["name"]))
    if parent is not None:
        links.append(Link(parent, node_id))

    for child in tree.get("children", []):
        flatten(child, node_id, nodes, links)
    return nodes, links


def find_id(nodes: list, name: str) -> Optional[str]:
    """Id of the person, team or team member called ``name``."""
    for node in nodes:
        for item in (node, *getattr(node, "children", ())):
            if item.name == name:
                return item.id
    return None


def parse_size(text: str) -> tuple[float, float]:
    width, _, height = text.partition("x")
    return float(width), float(height)


def main() -> None:
    parser = argparse.ArgumentParser(description="Render a sample org chart to SVG")
    parser.add_argument("--focus", default=None, help="Name of the person or team to focus")
    parser.add_argument("--size", default="1200x900", help="Viewport size as WIDTHxHEIGHT")
    parser.add_argument("--seed", type=int, default=1, help="Random seed")
    parser.add_argument(
        "--output", type=Path, default=BUILD_DIR / "orgchart.svg", help="Output SVG path"
    )
    args = parser.parse_args()

    nodes, links = flatten(ORGANISATION)
    print(f"Organisation: {len(nodes)} top-level nodes, {len(links)} links")

    host = ManualHost()
    chart = OrgChart(
        parse_size(args.size),
        host=host,
        duration=0.0,
        layout_options={"random_seed": args.seed},
    )
    searched = find_id(nodes, args.focus) if args.focus else None
    layout = chart.mount(nodes, links, searched_node=searched)
    frames = host.flush()
    print(f"Settled after {layout.tick_count} ticks ({frames} frames)")

    for name, value in layout_quality_summary(layout).items():
        if isinstance(value, float):
            print(f"  {name}: {value:.3f}")
        else:
            print(f"  {name}: {value}")

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(chart.to_svg(), encoding="utf-8")
    print(f"Saved: {args.output}")
    chart.dispose()


if __name__ == "__main__":
    main()
