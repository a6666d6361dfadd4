"""
Run commands - stored runs on the API server.
"""

import sys

import httpx
from rich import print_json

from layerlint.cli import client
from layerlint.cli.commands.fix import print_result


def add_subparser(subparsers):
    parser = subparsers.add_parser("run", help="Stored runs (API server)")
    run_sub = parser.add_subparsers(dest="run_command", required=True)

    # show
    show_p = run_sub.add_parser("show", help="Show a stored run")
    show_p.add_argument("run_id", help="Run ID")
    show_p.add_argument("--json", action="store_true", help="Print the raw run as JSON")
    show_p.add_argument("--code", action="store_true", help="Print the final text")
    show_p.set_defaults(func=run_show)


def run_show(args):
    try:
        result = client.get_run(args.run_id)
    except httpx.HTTPError as e:
        print(f"✗ Error: {e}")
        sys.exit(1)

    if args.json:
        print_json(data=result)
        return

    print(f"Run: {result['id']}")
    print(f"Created: {result['created_at']}")
    print()
    print_result(result.get("filename") or "(stdin)", result)
    if args.code:
        print()
        print(result["final_text"])
