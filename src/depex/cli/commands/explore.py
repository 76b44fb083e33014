"""
Explore Command - Materialize the dependency neighborhood of an entity.

Expands the seed breadth-first, one level per --depth, stopping early once
the visible-node limit is reached. Fetch failures do not abort the run; they
are reported next to the resulting graph.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List

import click
from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from ...analysis.latest import collapse_non_latest, filter_latest
from ...analysis.stats import GraphStats, compute_stats
from ...config import Settings, load_settings
from ...core.engine import GraphEngine
from ...core.exceptions import DepexError
from ...core.result import map_ok, split_results
from ...core.types import Graph, GraphNode, NodeType
from ...fetching.base import NeighborhoodFetcher
from ...fetching.http import DepexApiFetcher
from ...fetching.static import StaticFetcher
from ..utils import configure_logging, echo_error, echo_info, echo_warning, json_envelope

logger = logging.getLogger(__name__)

console = Console()

NODE_TYPE_CHOICES = [t.value for t in NodeType if t != NodeType.UNKNOWN]


# --- API Models ---
class ExploreResponse(BaseModel):
    root_id: str
    graph: Graph
    stats: GraphStats
    failures: Dict[str, str] = Field(default_factory=dict)
    collapsed: List[str] = Field(default_factory=list)
    dropped: int = 0
    limit_reached: bool = False


async def materialize(
    seed: GraphNode,
    fetcher: NeighborhoodFetcher,
    depth: int,
    max_nodes: int,
    latest_only: bool = False,
) -> ExploreResponse:
    """Expand seed breadth-first up to depth levels and summarize the view."""
    engine = GraphEngine(seed, fetcher, max_nodes=max_nodes)
    frontier: List[str] = [seed.id]
    failures: Dict[str, str] = {}

    for level in range(depth):
        if not frontier or engine.node_limit_reached:
            break
        logger.debug(f"Expanding level {level + 1}: {len(frontier)} node(s)")
        results = await engine.expand_many(frontier)
        added, errors = split_results(frontier, [map_ok(r, lambda outcome: outcome.added_ids) for r in results])

        failures.update({node_id: str(error) for node_id, error in errors.items()})
        frontier = [child for children in added.values() for child in children]

    collapsed = collapse_non_latest(engine) if latest_only else []
    graph: Graph = filter_latest(engine.graph) if latest_only else engine.graph

    return ExploreResponse(
        root_id=engine.root_id,
        graph=graph,
        stats=compute_stats(graph),
        failures=failures,
        collapsed=collapsed,
        dropped=len(engine.diagnostics),
        limit_reached=engine.node_limit_reached,
    )


async def _run(seed: GraphNode, settings: Settings, fixture: str | None, depth: int, latest_only: bool) -> ExploreResponse:
    if fixture:
        fetcher = StaticFetcher.from_file(Path(fixture))
        return await materialize(seed, fetcher, depth, settings.max_nodes, latest_only)

    async with DepexApiFetcher(settings) as fetcher:
        return await materialize(seed, fetcher, depth, settings.max_nodes, latest_only)


@click.command()
@click.argument("purl")
@click.option("-t", "--type", "node_type", type=click.Choice(NODE_TYPE_CHOICES),
              default=NodeType.PYPI_PACKAGE.value, show_default=True,
              help="Kind of the seed entity")
@click.option("-n", "--name", help="Display name of the seed (defaults to PURL)")
@click.option("-d", "--depth", default=1, type=click.IntRange(min=0), show_default=True,
              help="Number of expansion levels")
@click.option("--fixture", type=click.Path(exists=True, dir_okay=False),
              help="Serve neighborhoods from a JSON fixture instead of the API")
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False),
              help="Path to config.yaml (default: .depex/config.yaml)")
@click.option("--latest-only", is_flag=True, help="Keep only the latest version of each package")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def explore(
    purl: str,
    node_type: str,
    name: str | None,
    depth: int,
    fixture: str | None,
    config_path: str | None,
    latest_only: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    """
    Explore the dependency graph around PURL.

    PURL is a package URL, a version purl, or a requirement-file id.
    """
    configure_logging(verbose)
    seed = GraphNode.seed(purl, name or purl, node_type)

    try:
        settings = load_settings(Path(config_path) if config_path else None)
        response = asyncio.run(_run(seed, settings, fixture, depth, latest_only))
    except (DepexError, json.JSONDecodeError) as e:
        if as_json:
            click.echo(json_envelope("explore", error=e))
        else:
            echo_error(str(e))
        sys.exit(1)

    if as_json:
        data = response.model_dump(mode="json", exclude={"graph"})
        data["graph"] = response.graph.to_dict()
        click.echo(json_envelope("explore", data=data))
        return

    _print_human(response)


def _node_label(node: GraphNode) -> str:
    label = escape(node.label or node.id)
    ecosystem = f" [magenta]\\[{node.type.ecosystem}][/magenta]" if node.type.ecosystem else ""
    vulns = node.props.get("vulnerabilities") or []
    vuln_text = f" [red]⚠ {len(vulns)} vulnerabilities[/red]" if vulns else ""
    return f"[cyan]{label}[/cyan] [dim]({node.type.value})[/dim]{ecosystem}{vuln_text}"


def build_tree(graph: Graph, root_id: str) -> Tree:
    """Render the graph as a rich Tree rooted at root_id; shared nodes are expanded once."""
    root = graph.get_node(root_id)
    tree = Tree(_node_label(root) if root else root_id)
    seen = {root_id}
    stack = [(root_id, tree)]

    while stack:
        node_id, branch = stack.pop()
        for edge in graph.outgoing(node_id):
            target = graph.get_node(edge.target)
            if target is None:
                continue
            relation = f"[dim]{edge.type or 'edge'}"
            if edge.constraints:
                relation += f" {escape(edge.constraints)}"
            relation += "[/dim] "
            if edge.target in seen:
                branch.add(f"{relation}{_node_label(target)} [dim](shown elsewhere)[/dim]")
                continue
            seen.add(edge.target)
            stack.append((edge.target, branch.add(f"{relation}{_node_label(target)}")))

    return tree


def _print_human(response: ExploreResponse) -> None:
    console.print(build_tree(response.graph, response.root_id))
    click.echo()

    stats = response.stats
    click.echo(
        f"📊 {stats.total_nodes} nodes, {stats.total_edges} edges, "
        f"{stats.package_nodes} packages, {stats.version_nodes} versions, "
        f"max depth {stats.max_depth}"
    )
    if stats.total_vulnerabilities:
        echo_warning(f"{stats.total_vulnerabilities} vulnerabilities across {stats.nodes_with_vulnerabilities} node(s)")
    if response.limit_reached:
        echo_warning("Node limit reached; expansion stopped early")
    if response.collapsed:
        echo_info(f"Collapsed {len(response.collapsed)} non-latest version(s)")
    if response.dropped:
        echo_info(f"Dropped {response.dropped} malformed fragment entr{'y' if response.dropped == 1 else 'ies'}")
    for node_id, message in response.failures.items():
        echo_warning(f"Could not expand {node_id}: {message}")
