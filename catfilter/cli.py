"""
Command-line interface for catfilter.

Notes
-----
The CLI is intentionally thin. It opens a persistent FilterSession under the
data root, parses arguments and delegates to engine modules.

Exit codes
----------
- 0: success
- 2: the engine rejected the request (capacity, bad index, unknown preset, ...)
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from filter_engine.errors import FilterEngineError
from filter_engine.presets import BUILTIN_PRESETS
from filter_engine.properties import KNOWN_KIND_COUNT, PropertyKind, property_name
from filter_engine.rules.models import RuleOperator
from filter_engine.session import FilterSession, open_session

_OPERATOR_CHOICES = {
    "and": RuleOperator.AND,
    "or": RuleOperator.OR,
    "and-not": RuleOperator.AND_NOT,
}


def parse_property(text: str) -> int:
    """
    Parse a property given by id, enum name or display name.

    Raises
    ------
    argparse.ArgumentTypeError
        If text names no property.
    """
    cleaned = text.strip()
    if cleaned.lstrip("-").isdigit():
        return int(cleaned)
    key = cleaned.replace("-", "_").replace(" ", "_").upper()
    if key in PropertyKind.__members__:
        return PropertyKind[key]
    for kind in PropertyKind:
        if property_name(kind).casefold() == cleaned.casefold():
            return kind
    raise argparse.ArgumentTypeError(f"Unknown property: {text!r}")


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.
    """
    parser = argparse.ArgumentParser(
        prog="catfilter",
        description="Compose and recall catalog filter rule sets",
    )
    parser.add_argument(
        "--data-root",
        default=None,
        help="Override the data root (primarily for testing). If omitted, defaults are used.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Print the current rules and their serialized form")
    sub.add_parser("properties", help="List property kinds with their usage counts")

    add_p = sub.add_parser("add", help="Append a rule for a property")
    add_p.add_argument("property", type=parse_property, help="Property id or name")

    remove_p = sub.add_parser("remove", help="Remove the rule at an index")
    remove_p.add_argument("index", type=int)

    set_p = sub.add_parser("set", help="Change fields of the rule at an index (one rebuild)")
    set_p.add_argument("index", type=int)
    set_p.add_argument("--property", type=parse_property, default=None)
    set_p.add_argument("--operator", choices=sorted(_OPERATOR_CHOICES), default=None)
    toggle = set_p.add_mutually_exclusive_group()
    toggle.add_argument("--enable", action="store_true")
    toggle.add_argument("--disable", action="store_true")
    set_p.add_argument("--text", default=None, help="Raw text value for the rule")

    sub.add_parser("clear", help="Remove every rule")

    history_p = sub.add_parser("history", help="List history entries or apply one")
    history_p.add_argument("--apply", type=int, default=None, metavar="N")
    history_p.add_argument(
        "--max", type=int, default=None, metavar="N", help="Set and persist the history capacity"
    )

    config_p = sub.add_parser("config", help="Show stored filter settings, or change engine settings")
    config_p.add_argument(
        "--compress-presets",
        choices=["on", "off"],
        default=None,
        help="Save new presets zstandard-compressed",
    )

    preset_p = sub.add_parser("preset", help="Manage presets")
    preset_sub = preset_p.add_subparsers(dest="preset_command", required=True)
    preset_sub.add_parser("list", help="List built-in and saved presets")
    for name, help_text in (
        ("save", "Save the current rules as a named preset"),
        ("apply", "Replace the current rules with a preset"),
        ("delete", "Delete a saved preset"),
    ):
        p = preset_sub.add_parser(name, help=help_text)
        p.add_argument("name")

    return parser


def _print_rules(session: FilterSession) -> None:
    rules = session.rules.rules
    if not rules:
        print("(no rules)")
    for rule in rules:
        op = "" if rule.index == 0 else f"{rule.operator.name.lower().replace('_', ' ')} "
        state = "" if rule.enabled else " (off)"
        print(f"{rule.index}: {op}{property_name(rule.property)}{state} {rule.raw_text!r}")
    print(f"serialized: {session.rules.serialize()}")


def _run_set(session: FilterSession, args: argparse.Namespace) -> None:
    rules = session.rules
    with session.batch():
        if args.property is not None:
            rules.set_property(args.index, args.property)
        if args.operator is not None:
            rules.set_operator(args.index, _OPERATOR_CHOICES[args.operator])
        if args.enable:
            rules.set_enabled(args.index, True)
        if args.disable:
            rules.set_enabled(args.index, False)
        if args.text is not None:
            rules.set_raw_text(args.index, args.text)


def _run_history(session: FilterSession, args: argparse.Namespace) -> None:
    if args.max is not None:
        session.update_engine_settings(history_max=args.max)
    if args.apply is not None:
        if not session.apply_history(args.apply):
            print(f"No history entry {args.apply}; nothing applied.")
            return
        _print_rules(session)
        return
    items = session.list_history()
    if not items:
        print("(history is empty)")
    for item in items:
        print(f"{item.index}: {item.summary or '(no rules)'}")


def _run_preset(session: FilterSession, args: argparse.Namespace) -> None:
    store = session.presets
    if args.preset_command == "list":
        for name in BUILTIN_PRESETS:
            print(f"[built-in] {name}")
        for name in store.names() if store is not None else []:
            print(name)
        return
    if store is None:
        raise FilterEngineError("This session has no preset store.")
    if args.preset_command == "save":
        path = store.save(args.name, session.capture_preset())
        print(f"Saved preset to {path}")
    elif args.preset_command == "apply":
        session.apply_named_preset(args.name)
        _print_rules(session)
    elif args.preset_command == "delete":
        store.delete(args.name)


def _run_config(session: FilterSession, args: argparse.Namespace) -> None:
    if args.compress_presets is not None:
        settings = session.update_engine_settings(compress_presets=args.compress_presets == "on")
        print(f"compress_presets = {'on' if settings.compress_presets else 'off'}")
        return
    order = session.saved_sort_order()
    if order is not None:
        sort_field, descending = order
        print(f"saved sort order: field {sort_field}, {'descending' if descending else 'ascending'}")
    for key, value in session.stored_values():
        print(f"{key} = {value}")


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv:
        Optional argument vector. If None, argparse uses sys.argv.

    Returns
    -------
    int
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    data_root = Path(args.data_root) if args.data_root else None

    try:
        session = open_session(data_root)

        if args.command == "show":
            _print_rules(session)
        elif args.command == "properties":
            for property_id in range(KNOWN_KIND_COUNT):
                uses = session.rules.usage_count(property_id)
                entry = "specialized" if session.registry.has_specialized(property_id) else "text"
                print(f"{property_id:>3} {property_name(property_id):<18} {entry:<11} used {uses}")
        elif args.command == "add":
            session.rules.append(args.property)
            _print_rules(session)
        elif args.command == "remove":
            session.rules.remove(args.index)
            _print_rules(session)
        elif args.command == "set":
            _run_set(session, args)
            _print_rules(session)
        elif args.command == "clear":
            session.rules.clear()
            _print_rules(session)
        elif args.command == "history":
            _run_history(session, args)
        elif args.command == "preset":
            _run_preset(session, args)
        elif args.command == "config":
            _run_config(session, args)
        else:
            parser.print_help()
    except (FilterEngineError, ValueError) as exc:
        print(f"ERROR: {exc}")
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
