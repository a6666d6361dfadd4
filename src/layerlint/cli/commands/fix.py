"""
Fix command - run layers over files and write the results back.
"""

import sys
from pathlib import Path

import httpx
from pydantic import ValidationError
from rich import print_json

from layerlint.cli import client
from layerlint.cli.logs import setup_logging
from layerlint.core.config import EngineConfig
from layerlint.core.engine import BatchItem, Engine
from layerlint.core.errors import LayerlintError
from layerlint.core.run import RunOptions


ICONS = {"accepted": "✓", "reverted": "↺", "failed": "✗"}


def add_subparser(subparsers):
    parser = subparsers.add_parser("fix", help="Run layers over files")
    parser.add_argument("files", nargs="+", help="Files to fix")
    parser.add_argument("--layers", "-l", nargs="+", type=int, help="Layer ids (default: recommended)")
    parser.add_argument("--dry-run", action="store_true", help="Preview, don't write files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log each layer step")
    parser.add_argument("--timeout", type=float, help="Per-file time budget in seconds")
    parser.add_argument("--no-cache", action="store_true", help="Bypass the result cache")
    parser.add_argument("--remote", action="store_true", help="Run on the API server")
    parser.add_argument("--json", action="store_true", help="Print raw results as JSON")
    parser.set_defaults(func=fix_files)


def print_result(path: str, result: dict):
    """Summary of one file's run, from its dict form."""
    tag = " (dry run)" if result["dry_run"] else ""
    cached = " (cached)" if result["from_cache"] else ""
    print(f"{path}{tag}{cached}")
    for warning in result["resolution"]["warnings"]:
        print(f"  ! {warning}")
    for o in result["outcomes"]:
        icon = ICONS.get(o["status"], "?")
        if o["skipped"]:
            print(f"  - layer {o['layer_id']}: not applicable")
            continue
        line = f"  {icon} layer {o['layer_id']}: {o['status']}"
        if o["status"] == "accepted":
            line += f", {o['change_count']} line(s) changed"
        if o["revert_reason"]:
            line += f" ({o['revert_reason']})"
        if o["error"]:
            line += f" ({o['error']})"
        print(line)
        for imp in o["improvements"]:
            print(f"      • {imp}")
        if o["warning"]:
            print(f"      ! {o['warning']}")
        if o["diagnostic"] and o["status"] == "failed":
            print(f"      → {o['diagnostic']['suggestion']}")
    if result["aborted"]:
        print(f"  ✗ aborted: {result['abort_reason']}")
    if result["cancelled"]:
        print("  ✗ cancelled")


def _local(args, paths: list[Path], options: RunOptions) -> list[dict]:
    engine = Engine(EngineConfig.load(args.config))
    items = [BatchItem(p.read_text(), str(p)) for p in paths]
    results = engine.run_batch(items, layers=args.layers, options=options)
    return [r.to_dict() for r in results]


def _remote(args, paths: list[Path], options: RunOptions) -> list[dict]:
    results = []
    for p in paths:
        results.append(client.create_run(
            p.read_text(),
            filename=str(p),
            layers=args.layers,
            dry_run=options.dry_run,
            timeout=options.timeout,
            use_cache=options.use_cache,
        ))
    return results


def fix_files(args):
    setup_logging(args.verbose)

    paths = [Path(f) for f in args.files]
    for p in paths:
        if not p.is_file():
            print(f"✗ File not found: {p}")
            sys.exit(1)

    options = RunOptions(
        dry_run=args.dry_run,
        verbose=args.verbose,
        timeout=args.timeout,
        use_cache=not args.no_cache,
    )

    try:
        if args.remote:
            results = _remote(args, paths, options)
        else:
            results = _local(args, paths, options)
    except (LayerlintError, ValidationError, httpx.HTTPError, OSError) as e:
        print(f"✗ Error: {e}")
        sys.exit(1)

    failed = False
    for p, result in zip(paths, results):
        if args.json:
            print_json(data=result)
        else:
            print_result(str(p), result)
        if result["aborted"]:
            failed = True
            continue
        if not args.dry_run and result["changed"]:
            p.write_text(result["final_text"])
            if not args.json:
                print(f"  ✓ wrote {p}")

    if failed:
        sys.exit(1)
