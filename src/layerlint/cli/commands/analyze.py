"""
Analyze command - show which layers a file would benefit from.
"""

import sys
from pathlib import Path

import httpx
from pydantic import ValidationError
from rich import print_json

from layerlint.cli import client
from layerlint.core.config import EngineConfig
from layerlint.core.engine import Engine
from layerlint.core.errors import LayerlintError


def add_subparser(subparsers):
    parser = subparsers.add_parser("analyze", help="Recommend layers for a file")
    parser.add_argument("file", help="File to analyze")
    parser.add_argument("--remote", action="store_true", help="Run on the API server")
    parser.add_argument("--json", action="store_true", help="Print raw analysis as JSON")
    parser.set_defaults(func=analyze_file)


def analyze_file(args):
    path = Path(args.file)
    if not path.is_file():
        print(f"✗ File not found: {args.file}")
        sys.exit(1)

    try:
        text = path.read_text()
        if args.remote:
            analysis = client.analyze(text, str(path))
        else:
            analysis = Engine(EngineConfig.load(args.config)).analyze(text, str(path)).to_dict()
    except (LayerlintError, ValidationError, httpx.HTTPError, OSError) as e:
        print(f"✗ Error: {e}")
        sys.exit(1)

    if args.json:
        print_json(data=analysis)
        return

    layers = " ".join(str(l) for l in analysis["recommended_layers"])
    print(f"{path}")
    print(f"  recommended layers: {layers}")
    print(f"  confidence: {analysis['confidence']:.2f}")
    print(f"  impact: {analysis['impact']['level']} ({analysis['impact']['description']})")
    if analysis["issues"]:
        print()
        for issue in analysis["issues"]:
            print(f"  [{issue['severity']}] layer {issue['layer']}: {issue['description']}")
    print()
    for reason in analysis["reasons"]:
        print(f"  • {reason}")
