"""Receipt command handlers used by the unified CLI."""

import argparse
import json
import sys

from tillroll.runtime import get_logger

logger = get_logger(__name__)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI receipt parse server."""
    import uvicorn

    from tillroll.runtime import receipt_server as server

    print(f"Starting receipt server on {args.host}:{args.port}")
    print(f"Parse endpoint: http://{args.host}:{args.port}/parse")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)


def cmd_parse(args: argparse.Namespace) -> None:
    """Parse one receipt from its image URLs and print the result as JSON."""
    from tillroll.application.receipts.record import build_receipt_update
    from tillroll.application.receipts.scan import ReceiptParseRequest, run_receipt_parse

    outcome = run_receipt_parse(
        ReceiptParseRequest(
            image_urls=args.image_urls,
            store_name_hint=args.store,
            total_amount_hint=args.total,
            service_url=args.service_url,
            save_debug_json=args.save_json,
        )
    )

    if outcome.status == "no_images":
        print(f"Error: {outcome.error}")
        sys.exit(1)

    if outcome.status == "analysis_unavailable":
        logger.error("%s", outcome.error)
        print(f"Analysis service unavailable: {outcome.error}")
        print("Make sure the analysis service is running before parsing receipts.")
        sys.exit(1)

    result = outcome.result
    if result is None:
        print("Parse failed: missing result.")
        sys.exit(1)

    for url in outcome.skipped_images:
        print(f"Skipped image: {url}", file=sys.stderr)

    if args.record:
        payload = build_receipt_update(result, store_name_hint=args.store, total_amount_hint=args.total)
    else:
        payload = result.to_dict()
    print(json.dumps(payload, indent=2))
