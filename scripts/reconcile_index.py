#!/usr/bin/env python3
"""
Index Reconcile Utility
Creates missing vector sidecars for journal notes in the project and user stores.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from journal_index.core.config import (
    get_embedding_engine,
    get_project_journal_path,
    get_user_journal_path,
    validate_config,
)
from journal_index.core.search_service import SearchService


def main(argv=None):
    """Reconcile both journal stores and print a summary."""
    parser = argparse.ArgumentParser(
        description="Backfill missing embeddings for journal entries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                   # Use configured store roots
  %(prog)s --project-path ./.private-journal # Override the project store

Environment variables:
- JOURNAL_PROJECT_PATH / JOURNAL_USER_PATH (store roots)
- EMBED_PROVIDER=sentence_transformers|hash
- EMBED_MODEL_NAME=sentence-transformers/all-MiniLM-L6-v2
        """
    )

    parser.add_argument(
        "--project-path",
        help="Project journal root (default: configured project path)"
    )

    parser.add_argument(
        "--user-path",
        help="User journal root (default: configured user path)"
    )

    args = parser.parse_args(argv)

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}")
        sys.exit(1)

    project_path = str(Path(args.project_path).resolve()) if args.project_path else get_project_journal_path()
    user_path = str(Path(args.user_path).resolve()) if args.user_path else get_user_journal_path()

    print("Starting journal index reconciliation...")
    print(f"  Project store: {project_path}")
    print(f"  User store:    {user_path}")

    service = SearchService(get_embedding_engine(), project_path, user_path)
    created = asyncio.run(service.reconcile_all())

    print(f"✓ Created {created} missing embedding(s)")
    print("Reconciliation complete!")
    return created


if __name__ == "__main__":
    main()
