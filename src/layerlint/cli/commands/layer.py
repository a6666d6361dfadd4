"""
Layer commands.
"""

import sys

import httpx
from pydantic import ValidationError

from layerlint.cli import client
from layerlint.core.config import EngineConfig
from layerlint.core.engine import Engine
from layerlint.core.errors import LayerlintError


def add_subparser(subparsers):
    parser = subparsers.add_parser("layer", help="Layer catalogue")
    layer_sub = parser.add_subparsers(dest="layer_command", required=True)

    # list
    list_p = layer_sub.add_parser("list", help="List all registered layers")
    list_p.add_argument("--remote", action="store_true", help="Ask the API server instead")
    list_p.set_defaults(func=layer_list)


def layer_list(args):
    try:
        if args.remote:
            layers = client.list_layers()
        else:
            engine = Engine(EngineConfig.load(args.config))
            layers = [d.to_dict() for d in engine.describe_layers()]
    except (LayerlintError, ValidationError, httpx.HTTPError, OSError) as e:
        print(f"✗ Error: {e}")
        sys.exit(1)

    print("Registered layers:\n")
    for layer in layers:
        deps = ", ".join(str(d) for d in layer["dependencies"]) or "(none)"
        modes = [m for m, on in layer["capabilities"].items() if on]
        critical = "  [critical]" if layer["critical"] else ""
        print(f"  {layer['id']}  {layer['name']}{critical}")
        print(f"    {layer['description']}")
        print(f"    depends_on: {deps}")
        print(f"    strategies: {', '.join(modes)}")
        if layer["file_types"]:
            print(f"    files: {' '.join(layer['file_types'])}")
        print()
