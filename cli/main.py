#!/usr/bin/env python3

import argparse
from collections.abc import Callable, Sequence
from decimal import Decimal, InvalidOperation

from tillroll.runtime import DEFAULT_ANALYSIS_SERVICE_URL


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def _money(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"not an amount: {value!r}") from exc
    if not amount.is_finite():
        raise argparse.ArgumentTypeError(f"not an amount: {value!r}")
    return amount


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Receipt parsing CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  parse <image_url>...       Parse one receipt from one or more image URLs
  serve [--port]             Start the receipt parse server
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Parse a receipt from image URLs")
    parse_parser.add_argument("image_urls", nargs="+", help="Receipt image URLs, in page order")
    parse_parser.add_argument("--store", default=None, help="Store name to use when OCR finds none")
    parse_parser.add_argument("--total", type=_money, default=None, help="Receipt total to use when OCR finds none")
    parse_parser.add_argument(
        "--service-url",
        default=None,
        help=f"Analysis service URL (default: $ANALYSIS_SERVICE_URL or {DEFAULT_ANALYSIS_SERVICE_URL})",
    )
    parse_parser.add_argument("--save-json", action="store_true", help="Save raw analysis responses for debugging")
    parse_parser.add_argument("--record", action="store_true", help="Print receipt-record field updates instead")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start receipt parse server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "parse":
        from tillroll.cli.receipt import cmd_parse

        return _run_command(cmd_parse, args)
    elif args.command == "serve":
        from tillroll.cli.receipt import cmd_serve

        return _run_command(cmd_serve, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
