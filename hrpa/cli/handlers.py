import argparse
import json
import logging
from pathlib import Path

from hrpa.context import AutomationContext, build_context
from hrpa.contracts import load_workflow
from hrpa.domains.control import UiController
from hrpa.domains.locate import SearchConditions, format_path
from hrpa.domains.workflow import WorkflowEngine
from hrpa.settings import load_settings
from infra.hdc import abilities_command, windows_command
from infra.windowmanager import format_window_table, parse_windows
from shared.errors import HdcError, InputValidationError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_property(value):
    key, sep, raw = value.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError("property must be KEY=VALUE")
    return key.strip(), raw


def build_parser():
    parser = argparse.ArgumentParser(description="HarmonyOS UI automation over hdc")
    parser.add_argument("--config", default=None, help="Path to config.json")
    parser.add_argument("--hdc", dest="hdc_path", default=None, help="Path to hdc")
    parser.add_argument("--device", default=None, help="hdc connect key")
    parser.add_argument(
        "--log-level", default=None, help="Logging level (default: settings)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("windows", help="List windows from WindowManagerService")
    subparsers.add_parser("abilities", help="Dump AbilityManagerService state")

    tree_parser = subparsers.add_parser("tree", help="Dump the RenderService UI tree")
    tree_parser.add_argument("--pid", type=int, default=None, help="Process id")
    tree_parser.add_argument(
        "--format",
        choices=("json", "compact", "summary", "text"),
        default="compact",
        help="Output format (default: compact)",
    )
    tree_parser.add_argument(
        "--max-depth", type=int, default=50, help="Depth limit for compact output"
    )

    search_parser = subparsers.add_parser("search", help="Search UI tree nodes")
    search_parser.add_argument("--pid", type=int, default=None, help="Process id")
    search_parser.add_argument("--tag", default=None, help="frameNodeTag filter")
    search_parser.add_argument("--name", default=None, help="Name substring filter")
    search_parser.add_argument("--type", dest="node_type", default=None, help="Node type")
    search_parser.add_argument(
        "--max-results", type=int, default=50, help="Maximum results (default: 50)"
    )

    find_parser = subparsers.add_parser("find", help="Resolve elements with scoring")
    find_parser.add_argument("--pid", type=int, default=None, help="Process id")
    find_parser.add_argument("--text", default=None, help="Text to match")
    find_parser.add_argument(
        "--exact", action="store_true", help="Exact text match (with --text only)"
    )
    find_parser.add_argument("--type", dest="node_type", default=None, help="Node type")
    find_parser.add_argument(
        "--prop",
        action="append",
        type=parse_property,
        default=None,
        help="Property condition KEY=VALUE (repeatable)",
    )

    tap_parser = subparsers.add_parser("tap", help="Tap a screen point")
    tap_parser.add_argument("x", type=float)
    tap_parser.add_argument("y", type=float)

    tap_text_parser = subparsers.add_parser("tap-text", help="Tap the best text match")
    tap_text_parser.add_argument("text")
    tap_text_parser.add_argument("--pid", type=int, default=None, help="Process id")

    swipe_parser = subparsers.add_parser("swipe", help="Swipe between two points")
    swipe_parser.add_argument("x1", type=float)
    swipe_parser.add_argument("y1", type=float)
    swipe_parser.add_argument("x2", type=float)
    swipe_parser.add_argument("y2", type=float)
    swipe_parser.add_argument(
        "--duration", type=int, default=300, help="Swipe duration in ms (default: 300)"
    )

    key_parser = subparsers.add_parser("key", help="Send a key event")
    key_parser.add_argument("code", help="Key code or name (Back, Home, ...)")

    run_parser = subparsers.add_parser("run", help="Run a workflow JSON file")
    run_parser.add_argument("workflow", help="Workflow JSON path")
    run_parser.add_argument(
        "--output", default=None, help="Write workflow result JSON to file"
    )
    run_parser.add_argument(
        "--stop-on-failure",
        action="store_true",
        help="Stop at the first failed step (default: continue)",
    )

    return parser


def print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def handle_tree(context: AutomationContext, args):
    output = UiController(context).dump()
    parser = context.parser
    if args.format == "summary":
        print(parser.get_summary(output))
        return 0
    if args.format == "compact":
        print(parser.to_compact_json(output, pid=args.pid, max_depth=args.max_depth))
        return 0
    trees = parser.parse(output)
    if args.pid:
        trees = {args.pid: trees[args.pid]} if args.pid in trees else {}
    if args.format == "json":
        print_json({str(pid): root.to_dict() for pid, root in trees.items()})
        return 0
    for pid, root in trees.items():
        print("PID {}".format(pid))
        for node in root.iter_nodes():
            print("{}{}".format("  " * node.depth, node.label))
    return 0


def handle_find(context: AutomationContext, args):
    controller = UiController(context)
    resolver = context.resolver
    forest = controller.ingest()
    properties = dict(args.prop or [])
    if args.text and not args.node_type and not properties:
        matches = resolver.resolve(
            forest,
            lambda root: resolver.find_by_text(root, args.text, exact_match=args.exact),
            pid=args.pid,
        )
    elif args.node_type and not args.text and not properties:
        matches = resolver.resolve(
            forest, lambda root: resolver.find_by_type(root, args.node_type), pid=args.pid
        )
    else:
        conditions = SearchConditions(
            text=args.text, type=args.node_type, properties=properties
        )
        matches = resolver.resolve(
            forest, lambda root: resolver.find_by_conditions(root, conditions), pid=args.pid
        )
    payload = []
    for match in matches:
        item = match.to_dict()
        item["path"] = format_path(match.path)
        coordinates = resolver.get_coordinates(match.node)
        if coordinates is not None:
            item["coordinates"] = coordinates.to_dict()
        payload.append(item)
    print_json({"matches": payload})
    return 0


def handle_run(context: AutomationContext, args):
    steps = load_workflow(args.workflow)
    engine = WorkflowEngine(context, stop_on_failure=args.stop_on_failure)
    result = engine.run_sequence(steps)
    output_text = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(output_text, encoding="utf-8")
    print(output_text)
    return 0 if result.success else 1


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            hdc_path=args.hdc_path,
            device_id=args.device,
            log_level=args.log_level,
        )
    except FileNotFoundError as exc:
        raise HdcError(str(exc)) from exc
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    context = build_context(settings)
    channel = context.channel

    if args.command == "windows":
        print(format_window_table(parse_windows(channel.run_command(windows_command()))))
        return 0

    if args.command == "abilities":
        print(channel.run_command(abilities_command()))
        return 0

    if args.command == "tree":
        return handle_tree(context, args)

    if args.command == "search":
        output = UiController(context).dump()
        print(
            context.parser.search_nodes(
                output,
                pid=args.pid,
                frame_node_tag=args.tag,
                node_name=args.name,
                node_type=args.node_type,
                max_results=args.max_results,
            )
        )
        return 0

    if args.command == "find":
        return handle_find(context, args)

    if args.command == "tap":
        context.executor.tap(args.x, args.y)
        print("tapped ({}, {})".format(args.x, args.y))
        return 0

    if args.command == "tap-text":
        result = UiController(context).smart_tap(args.text, pid=args.pid)
        print_json(result.to_dict())
        return 0 if result.success else 1

    if args.command == "swipe":
        context.executor.swipe(args.x1, args.y1, args.x2, args.y2, duration_ms=args.duration)
        print("swiped ({}, {}) -> ({}, {})".format(args.x1, args.y1, args.x2, args.y2))
        return 0

    if args.command == "key":
        context.executor.press_key(args.code)
        print("key {}".format(args.code))
        return 0

    if args.command == "run":
        return handle_run(context, args)

    raise InputValidationError("unknown command")
