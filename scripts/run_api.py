#!/usr/bin/env python3
"""
Serve the journal index API with uvicorn.
"""

import argparse
import sys
from pathlib import Path

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the journal index API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    args = parser.parse_args()

    uvicorn.run("journal_index.api.main:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
