"""
layerlint CLI.
"""

import argparse
from layerlint.cli.commands import analyze, fix, layer, run


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="layerlint", description="Layered React/Next.js code fixer")
    parser.add_argument("--config", help="Engine config JSON (default: $LAYERLINT_CONFIG)")
    subparsers = parser.add_subparsers(dest="command")

    layer.add_subparser(subparsers)
    fix.add_subparser(subparsers)
    analyze.add_subparser(subparsers)
    run.add_subparser(subparsers)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
