"""CLI entry point for graphtrace."""

import argparse
import json
import logging
import sys
from pathlib import Path

from graphtrace.algorithms.dijkstra import path_weight
from graphtrace.algorithms.prim import tree_weight
from graphtrace.algorithms.registry import ALGORITHMS, describe
from graphtrace.config import PlaybackConfig, load_config
from graphtrace.models import AlgorithmKind, AlgorithmResult, Snapshot, TraceEvent
from graphtrace.player import PlaybackMode
from graphtrace.store import GraphStore
from graphtrace.timers import VirtualClock

logger = logging.getLogger(__name__)


def _load_store(graph_path: str, config_path: str | None) -> tuple[GraphStore, VirtualClock]:
    config = load_config(Path(config_path) if config_path else None)
    clock = VirtualClock()
    store = GraphStore(config, scheduler=clock)
    snapshot = Snapshot.from_json(Path(graph_path).read_text())
    store.graph.restore(snapshot)
    logger.debug("Loaded %r from %s", store.graph, graph_path)
    return store, clock


def _format_event(event: TraceEvent) -> str:
    ref = event.edge
    if ref.is_root:
        return f"{event.phase.value:<6} {ref.to_id}"
    return f"{event.phase.value:<6} {ref.from_id} -> {ref.to_id}"


def _resolve_speed(value: str, playback: PlaybackConfig) -> float:
    """Accept a delay in ms ('250') or a named level ('2x')."""
    try:
        return float(value)
    except ValueError:
        return playback.speed_for(value)


def _print_result(store: GraphStore, result: AlgorithmResult) -> None:
    info = ALGORITHMS[result.algorithm]
    print(f"{info.name}: visited {result.visited_nodes}")
    if result.algorithm == AlgorithmKind.DIJKSTRA and result.result_edges:
        print(f"  path {result.path_nodes} (weight {path_weight(store.graph, result)})")
    if result.algorithm == AlgorithmKind.PRIM and result.visited_edges:
        print(f"  tree weight {tree_weight(store.graph, result)}")


def _add_run_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("graph", help="Graph snapshot JSON file")
    p.add_argument(
        "-a", "--algorithm", required=True,
        choices=[k.value for k in AlgorithmKind],
        help="; ".join(f"{k.value} = {describe(k)}" for k in AlgorithmKind),
    )
    p.add_argument("-s", "--start", type=int, required=True, help="Start node id")
    p.add_argument("-e", "--end", type=int, default=None, help="End node id (dijkstra)")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Graph algorithm tracer")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    # run command
    run_parser = sub.add_parser("run", help="Run an algorithm and print its trace")
    _add_run_args(run_parser)
    run_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    # play command
    play_parser = sub.add_parser("play", help="Replay a trace through the step player")
    _add_run_args(play_parser)
    play_parser.add_argument(
        "--mode", choices=[m.value for m in PlaybackMode], default=PlaybackMode.AUTO.value,
    )
    play_parser.add_argument(
        "--speed", default=None,
        help="Delay between steps in ms, or a level such as 0.5x, 1x, 2x, 4x",
    )

    # info command
    info_parser = sub.add_parser("info", help="Summarise a graph file")
    info_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    info_parser.add_argument("graph", help="Graph snapshot JSON file")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        store, clock = _load_store(args.graph, args.config)
    except (OSError, ValueError) as e:
        print(f"Could not load graph: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "info":
            graph = store.graph
            print(f"{len(graph.nodes)} nodes, {len(graph.all_edges())} edges (next id {graph.next_id})")
            for node in graph.nodes:
                targets = ", ".join(
                    f"{e.to_id}[{e.weight}{'' if e.is_undirected else '>'}]"
                    for e in graph.edges_from(node.id)
                )
                print(f"  {node.id}: {targets}")
            return 0

        if args.command == "run":
            result = store.run_algorithm(args.algorithm, args.start, args.end)
            store.player.reset()
            if args.json:
                print(json.dumps(result.model_dump(by_alias=True, mode="json")))
            else:
                for event in result.trace:
                    print(_format_event(event))
                _print_result(store, result)
            if not result.succeeded:
                print(result.error, file=sys.stderr)
                return 1
            return 0

        if args.command == "play":
            if args.speed is not None:
                store.player.set_speed(_resolve_speed(args.speed, store.config.playback))
            store.player.on_step = lambda event, index: print(
                f"[{clock.now_ms:>7.0f} ms] #{index:<3} {_format_event(event)}"
                + (f"  | {event.trace.message}" if event.trace else "")
            )
            result = store.run_algorithm(
                args.algorithm, args.start, args.end, mode=PlaybackMode(args.mode),
            )
            if not result.succeeded:
                print(result.error, file=sys.stderr)
                return 1
            if store.player.mode == PlaybackMode.MANUAL:
                store.player.play()
            clock.run_until_idle()
            state = "complete" if store.player.is_complete else store.player.status.value
            print(f"Playback {state} at {clock.now_ms:.0f} ms")
            _print_result(store, result)
            return 0
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
