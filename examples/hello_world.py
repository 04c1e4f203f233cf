#!/usr/bin/env python3
"""SheetPilot — Hello World example.

This script walks one request through the HTTP pipeline:

  1. Check the server is up
  2. Submit a natural-language request and print its preview
  3. Confirm the pending action
  4. Display the result

Prerequisites:
  - A running server: ``sheetpilot serve`` (in-memory sample table)
    or ``sheetpilot serve --workbook book.xlsx``

Usage:
  python examples/hello_world.py
  python examples/hello_world.py "insert profits" --base-url http://127.0.0.1:3001
"""

from __future__ import annotations

import argparse
import json
import sys

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="SheetPilot Hello World")
    parser.add_argument("message", nargs="?", default="sort by sales")
    parser.add_argument(
        "--base-url",
        default="http://127.0.0.1:3001",
        help="SheetPilot server URL (default: http://127.0.0.1:3001)",
    )
    args = parser.parse_args()

    print(f"Connecting to SheetPilot at {args.base_url}...")

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        health = client.get("/health").json()
        print(f"  Status:   {health['status']}")
        print(f"  Version:  {health['version']}")
        print(f"  Document: {health['document_backend']}")
        print()

        print(f"Submitting: {args.message!r}")
        submitted = client.post("/pipeline/submit", json={"message": args.message}).json()
        print(f"  Action:      {submitted['action']}")
        print(f"  Description: {submitted['description']}")
        if submitted["error"]:
            print(f"  Error:       {submitted['error']}")
            sys.exit(1)
        if submitted["preview"] is None:
            print("  Nothing to do.")
            return
        print("  Preview:")
        print(json.dumps(submitted["preview"], indent=2, ensure_ascii=False))
        print()

        print("Confirming...")
        result = client.post("/pipeline/confirm", json={"seq": submitted["seq"]}).json()
        if not result["success"]:
            print(f"  Failed: {result['error']}")
            sys.exit(1)
        print(f"  Done: {json.dumps(result['result'], ensure_ascii=False)}")


if __name__ == "__main__":
    main()
