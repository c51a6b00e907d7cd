#!/usr/bin/env python3
"""Command-line interface for the repair policy builder.

Commands:
  - repair-builder stats          : Status counts and urgency/priority distribution
  - repair-builder list           : List activities (with filter flags)
  - repair-builder select         : Toggle an activity's eligibility status
  - repair-builder override       : Set or clear urgency/condition overrides
  - repair-builder note           : Attach notes to an activity
  - repair-builder export         : Export the catalog (csv, pdf-print, image-placeholder)
  - repair-builder steps          : Show wizard step completeness
  - repair-builder manual-export  : Export the Word-compatible manual

Typical usage:
  repair-builder select 1.1.1.1 eligible
  repair-builder export --format csv --output exports
  repair-builder list --status unselected --critical-only
"""

from __future__ import annotations

import argparse
import json
import sys
import webbrowser
from pathlib import Path

from repair_builder import __version__
from repair_builder.catalog.filters import CatalogQuery, filter_taxonomy
from repair_builder.catalog.loader import (
    flatten,
    get_activity_by_id,
    load_taxonomy,
    load_taxonomy_from_path,
)
from repair_builder.catalog.priority import effective_priority
from repair_builder.catalog.selection_store import SelectionStore
from repair_builder.catalog.stats import compute_catalog_stats, compute_level_counts
from repair_builder.configs.config import Config
from repair_builder.configs.settings import get_settings
from repair_builder.errors import UnknownActivityError, UnsupportedExportFormatError
from repair_builder.export.base import ExportConfig, ExportFormat
from repair_builder.export.pipeline import export_catalog, save_artifact
from repair_builder.export.word_manual import render_manual
from repair_builder.monitoring.logging import LoggingOptions, setup_logger
from repair_builder.schemas.selection import SelectionStatus, StatusFilter, status_label
from repair_builder.schemas.taxonomy import Condition, Taxonomy, Urgency
from repair_builder.storage.kv_store import JsonFileKeyValueStore
from repair_builder.wizard.session import ManualSession
from repair_builder.wizard.steps import STEPS, step_status


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    p = argparse.ArgumentParser(
        prog="repair-builder", description="P&P Builder for Repair Programs"
    )
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--storage-dir",
        default=str(settings.STORAGE_DIR),
        help="Directory holding persisted selections and manual data",
    )
    p.add_argument("--taxonomy", default=None, help="Path to an alternative taxonomy JSON")
    p.add_argument("--json-logs", action="store_true", default=settings.JSON_LOGS, help="Emit JSON logs")
    p.add_argument("--log-level", default=settings.log_level, help="Log level (DEBUG, INFO, ...)")
    sub = p.add_subparsers(dest="cmd")

    # stats
    ps = sub.add_parser("stats", help="Show status counts and distributions")
    ps.add_argument("--json", action="store_true", help="Print as JSON")

    # list
    pl = sub.add_parser("list", help="List activities matching the filters")
    pl.add_argument("--text", "-t", default="", help="Search activity and type names")
    pl.add_argument("--pillar", default=None, help="Restrict to a pillar id")
    pl.add_argument("--sub-category", default=None, help="Restrict to a sub-category id")
    pl.add_argument("--type", dest="type_id", default=None, help="Restrict to a type id")
    pl.add_argument(
        "--status",
        default=None,
        choices=[s.value for s in StatusFilter],
        help="Restrict to a status (or 'unselected')",
    )
    pl.add_argument("--critical-only", action="store_true", help="Only critical urgency")

    # select
    psel = sub.add_parser("select", help="Toggle an activity's status")
    psel.add_argument("activity_id", help="Activity id (e.g. 1.1.1.1)")
    psel.add_argument("status", choices=[s.value for s in SelectionStatus], help="Status to toggle")

    # override
    po = sub.add_parser("override", help="Override urgency/condition for an activity")
    po.add_argument("activity_id", help="Activity id")
    po.add_argument("--urgency", choices=[u.value for u in Urgency], default=None)
    po.add_argument("--condition", choices=[c.value for c in Condition], default=None)
    po.add_argument("--clear", action="store_true", help="Restore the taxonomy defaults")

    # note
    pn = sub.add_parser("note", help="Attach notes to an activity (empty text clears)")
    pn.add_argument("activity_id", help="Activity id")
    pn.add_argument("text", help="Note text")

    # export
    pe = sub.add_parser("export", help="Export the catalog")
    pe.add_argument("--format", "-f", default=ExportFormat.CSV.value, help="csv | pdf-print | image-placeholder")
    pe.add_argument("--levels", nargs="*", default=None, help="pillar subCategory type")
    pe.add_argument("--elements", nargs="*", default=None, help="definitions criticality notes")
    pe.add_argument("--output", "-o", default=".", help="Output directory")
    pe.add_argument("--open", action="store_true", help="Open the report in the default browser")

    # steps
    sub.add_parser("steps", help="Show wizard step completeness")

    # manual-export
    pm = sub.add_parser("manual-export", help="Export the Word-compatible manual")
    pm.add_argument("--output", "-o", default=".", help="Output directory")

    return p.parse_args(argv)


def _load_taxonomy(args: argparse.Namespace) -> Taxonomy:
    if args.taxonomy:
        return load_taxonomy_from_path(args.taxonomy)
    return load_taxonomy()


def _print_selection(activity_id: str, store: SelectionStore) -> None:
    selection = store.get(activity_id)
    print(f"{activity_id}: {status_label(selection)}")
    if selection is not None:
        if selection.urgency is not None:
            print(f"  urgency override:   {selection.urgency.value}")
        if selection.condition is not None:
            print(f"  condition override: {selection.condition.value}")
        if selection.notes:
            print(f"  notes: {selection.notes}")


def main(argv: list[str] | None = None) -> int:
    """Run the CLI with the given arguments."""
    try:
        return _main_impl(argv)
    except (UnsupportedExportFormatError, UnknownActivityError) as e:
        print(str(e), file=sys.stderr)
        return 2
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename or e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in taxonomy: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _main_impl(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.version:
        print(f"repair-builder version {__version__}")
        return 0

    if not args.cmd:
        print("Error: Command required. Use --help for usage info.", file=sys.stderr)
        return 1

    setup_logger(LoggingOptions(level=args.log_level, json_logs=bool(args.json_logs)))
    backend = JsonFileKeyValueStore(args.storage_dir)

    if args.cmd == "steps":
        session = ManualSession.load(backend)
        data = session.data
        for i, step in enumerate(STEPS, start=1):
            print(f"{i:>2}. {step.title:<24} {step_status(step.id, data).value}")
        return 0

    if args.cmd == "manual-export":
        session = ManualSession.load(backend)
        store = SelectionStore.load(backend)
        artifact = render_manual(session.data, _load_taxonomy(args), store)
        path = save_artifact(artifact, args.output)
        print(f"Manual saved to {path}")
        return 0

    taxonomy = _load_taxonomy(args)
    store = SelectionStore.load(backend)

    if args.cmd in ("select", "override", "note"):
        # only new input is checked; persisted ids for retired activities stay inert
        get_activity_by_id(taxonomy, args.activity_id, strict=True)

    if args.cmd == "stats":
        stats = compute_catalog_stats(taxonomy, store)
        if args.json:
            print(json.dumps(stats.model_dump(), indent=2, ensure_ascii=False))
            return 0
        counts = stats.status
        print(f"Total activities: {counts.total}")
        print(f"  Eligible:     {counts.eligible}")
        print(f"  Conditional:  {counts.conditional}")
        print(f"  Not eligible: {counts.not_eligible}")
        print(f"  N/A:          {counts.na}")
        print(f"  Unselected:   {counts.unselected}")
        print("By urgency:   " + ", ".join(f"{k}={v}" for k, v in stats.by_urgency.items()))
        print("By priority:  " + ", ".join(f"{k}={v}" for k, v in stats.by_priority.items()))
        return 0

    if args.cmd == "list":
        query = CatalogQuery(
            text=args.text,
            pillar_id=args.pillar,
            sub_category_id=args.sub_category,
            type_id=args.type_id,
            status=args.status,
            critical_only=bool(args.critical_only),
        )
        filtered = filter_taxonomy(taxonomy, query, store)
        for row in flatten(filtered):
            selection = store.get(row.id)
            tier = effective_priority(row, selection)
            print(
                f"{row.id:<10} {status_label(selection):<13} "
                f"{tier.value if tier is not None else '-':<11} {row.name} [{row.type_name}]"
            )
        levels = compute_level_counts(taxonomy, filtered)
        print("-" * 60)
        print(
            f"Pillars {levels.pillar} | Sub-categories {levels.sub_category} | "
            f"Types {levels.type} | Activities {levels.activity}"
        )
        return 0

    if args.cmd == "select":
        store.toggle_status(args.activity_id, args.status)
        _print_selection(args.activity_id, store)
        return 0

    if args.cmd == "override":
        if args.clear:
            store.clear_overrides(args.activity_id)
        else:
            if args.urgency is None and args.condition is None:
                print("Error: pass --urgency, --condition or --clear.", file=sys.stderr)
                return 1
            if args.urgency is not None:
                store.set_urgency_override(args.activity_id, args.urgency)
            if args.condition is not None:
                store.set_condition_override(args.activity_id, args.condition)
        _print_selection(args.activity_id, store)
        return 0

    if args.cmd == "note":
        store.set_notes(args.activity_id, args.text)
        _print_selection(args.activity_id, store)
        return 0

    if args.cmd == "export":
        defaults = Config.get_export_defaults()
        try:
            export_format = ExportFormat(args.format)
        except ValueError:
            raise UnsupportedExportFormatError(args.format) from None
        config = ExportConfig(
            format=export_format,
            levels=args.levels if args.levels is not None else defaults.get("default_levels", []),
            elements=args.elements if args.elements is not None else defaults.get("default_elements", []),
        )
        artifact = export_catalog(taxonomy, store, config)
        path = save_artifact(artifact, args.output)
        print(f"Export saved to {path}")
        if args.open and config.format == ExportFormat.PDF_PRINT:
            webbrowser.open(path.resolve().as_uri())
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
