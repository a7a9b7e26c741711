"""Command-line entry point.

Two commands:

- ``flowmap compute GRAPH --source ID --output PATH``: load the graph,
  compute the flow map of one source and render and/or persist it.
- ``flowmap render-db URI --output PATH``: render a flow map from rows
  already stored in the database.

Command-line options override the environment-based configuration.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from .config import AppConfig, get_config
from .container import Container, create_canvas
from .domain.errors import ConfigurationError, FlowMapError
from .domain.models import Strategy
from .services import FlowMapService

logger = logging.getLogger("flowmap")

Section = TypeVar("Section", bound=BaseModel)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowmap",
        description="Shortest-path flow maps: how many shortest paths from "
        "one source use each road.",
    )
    parser.add_argument("--log-level", dest="log_level", default=None, help="Log level (e.g. INFO, DEBUG)")
    parser.add_argument("--no-progress", dest="progress", action="store_false", default=None, help="Hide progress bars")
    commands = parser.add_subparsers(dest="command", required=True)

    compute = commands.add_parser("compute", help="Compute and draw the flow map of a source node")
    compute.add_argument("graph", type=Path, help="Binary graph file, or directory holding nodes.csv/edges.csv")
    compute.add_argument("--source", dest="source_id", type=int, required=True, help="External id of the source node")
    compute.add_argument("--output", type=Path, default=None, help="Output document (.pdf, .svg or .html)")
    compute.add_argument("--format", dest="graph_format", choices=["osrm", "csv"], default=None, help="Graph input format")
    compute.add_argument("--mode", default=None, help="Capacity columns prefix for CSV graphs (e.g. car)")
    compute.add_argument("--strategy", choices=[s.value for s in Strategy], default=None, help="Shortest-path strategy")
    compute.add_argument("--max-width", dest="max_width", type=float, default=None, help="Stroke width of the busiest edge")
    compute.add_argument("--keep", type=int, default=None, help="Number of busiest edges drawn")
    compute.add_argument("--min-count", dest="min_count", type=int, default=None, help="Skip edges used fewer times")
    compute.add_argument("--db", dest="db_uri", default=None, help="SQLAlchemy URI; saves the usage rows when given")
    compute.add_argument("--table", default=None, help="Usage table name")
    compute.add_argument("--raw-wkt", dest="raw_wkt", action="store_true", help="Store geometries as WKT text (non-spatial databases)")

    render_db = commands.add_parser("render-db", help="Draw a flow map from stored usage rows")
    render_db.add_argument("db_uri", help="SQLAlchemy URI of the usage store")
    render_db.add_argument("--output", type=Path, required=True, help="Output document (.pdf, .svg or .html)")
    render_db.add_argument("--table", default=None, help="Usage table name")
    render_db.add_argument("--raw-wkt", dest="raw_wkt", action="store_true", help="Read geometries stored as WKT text")
    render_db.add_argument("--max-width", dest="max_width", type=float, default=None, help="Stroke width of the busiest edge")
    render_db.add_argument("--keep", type=int, default=None, help="Number of busiest edges drawn")
    render_db.add_argument("--min-count", dest="min_count", type=int, default=None, help="Skip edges used fewer times")
    return parser


def _updates(args: argparse.Namespace, names: Dict[str, str]) -> Dict[str, Any]:
    return {
        field: getattr(args, attr)
        for attr, field in names.items()
        if getattr(args, attr, None) is not None
    }


def _override(section: Section, update: Dict[str, Any]) -> Section:
    """Validate ``update`` on top of ``section``."""
    if not update:
        return section
    try:
        return type(section).model_validate({**section.model_dump(), **update})
    except ValidationError as e:
        error = e.errors()[0]
        setting = ".".join(str(part) for part in error["loc"])
        raise ConfigurationError(
            f"Invalid value for {setting}: {error['msg']}",
            setting_name=setting,
            cause=e,
        )


def apply_arguments(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return a copy of ``config`` overridden by the parsed arguments.

    Raises:
        ConfigurationError: If an override fails validation.
    """
    graph = _updates(args, {"graph": "path", "graph_format": "format", "mode": "mode"})
    solver = _updates(args, {"strategy": "strategy"})
    render = _updates(
        args, {"max_width": "max_width", "keep": "keep", "min_count": "min_count"}
    )
    store = _updates(args, {"db_uri": "uri", "table": "table"})
    if getattr(args, "raw_wkt", False):
        store["geometry_function"] = None
    observability = _updates(args, {"log_level": "level", "progress": "progress"})

    return config.model_copy(
        update={
            "graph": _override(config.graph, graph),
            "solver": _override(config.solver, solver),
            "render": _override(config.render, render),
            "store": _override(config.store, store),
            "observability": _override(config.observability, observability),
        }
    )


def configure_logging(config: AppConfig) -> None:
    logging.basicConfig(
        level=config.observability.level.upper(),
        format=config.observability.format,
    )


def _compute(service: FlowMapService, config: AppConfig, args: argparse.Namespace) -> None:
    canvas = None
    if args.output is not None:
        canvas = create_canvas(args.output)

    result = service.run(
        args.source_id,
        Strategy(config.solver.strategy),
        canvas=canvas,
        persist=service.usage_store is not None,
    )

    print(
        f"Source index {result.source_index}: {result.reachable_count}/"
        f"{result.node_count} nodes reached, {result.used_edge_count} edges used, "
        f"{result.rendered_edge_count} drawn (max count {result.max_count})"
    )
    for output in result.outputs:
        print(f"Flow map saved to: {output}")
    print(f"Total duration: {result.durations.get('total', 0.0):.1f}s")


def _render_db(service: FlowMapService, args: argparse.Namespace) -> None:
    report = service.render_stored(create_canvas(args.output))
    print(f"{report.drawn} edges drawn (max count {report.max_count})")
    if report.output_path is not None:
        print(f"Flow map saved to: {report.output_path}")


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    try:
        config = apply_arguments(get_config(), args)
    except ConfigurationError as e:
        logger.error("Invalid arguments: %s", e)
        return 1
    configure_logging(config)

    try:
        service = Container.create_default(config).resolve(FlowMapService)
        if args.command == "compute":
            _compute(service, config, args)
        else:
            _render_db(service, args)
    except FlowMapError as e:
        logger.error("Flow map run failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
