#!/usr/bin/env python3
"""
Audit establishment slugs stored in the database.

Reports establishments with no slug, slugs held by more than one row
(possible only on databases created without the UNIQUE constraint), and
slugs that do not pass validation. Suffixed slugs such as "salao-2" are
expected and only reported, not counted as failures.

Usage:
    python scripts/audit_slugs.py --db data/establishments.db
"""

import argparse
from collections import defaultdict
from pathlib import Path
import sys

from bizslug.database import Establishment, get_session
from bizslug.normalize import normalize_slug
from bizslug.schema import is_valid_slug


def audit(db_path: Path) -> bool:
    """
    Scan all establishments and print a report.

    Returns True if no establishment is missing a slug and no slug is shared.
    """
    print(f"Querying database at {db_path}...")
    session = get_session(db_path)
    try:
        establishments = session.query(Establishment).all()
        print(f"  {len(establishments)} establishments")

        missing = []
        owners = defaultdict(list)
        suffixed = []

        for est in establishments:
            if not est.slug:
                missing.append(est)
                continue
            owners[est.slug].append(est.id)
            if not is_valid_slug(est.slug):
                suffixed.append(est)

        duplicates = {slug: ids for slug, ids in owners.items() if len(ids) > 1}

        if missing:
            print(f"\n❌ MISSING SLUG: {len(missing)} establishments")
            for est in missing[:5]:
                print(f"   - {est.id} ({est.name}) -> suggested base: {normalize_slug(est.name)}")
            if len(missing) > 5:
                print(f"   ... and {len(missing) - 5} more")

        if duplicates:
            print(f"\n❌ DUPLICATE SLUGS: {len(duplicates)}")
            for slug, ids in list(duplicates.items())[:5]:
                print(f"   - {slug}: {', '.join(ids)}")
            if len(duplicates) > 5:
                print(f"   ... and {len(duplicates) - 5} more")

        if suffixed:
            print(f"\nℹ️  {len(suffixed)} slugs carry a disambiguation suffix or other non-base form")
            for est in suffixed[:5]:
                print(f"   - {est.slug} ({est.name})")

        if not missing and not duplicates:
            print("\n✅ All establishments have a unique slug")
            return True
        return False
    finally:
        session.close()


def main():
    parser = argparse.ArgumentParser(description="Audit establishment slugs")
    parser.add_argument("--db", type=Path, default=Path("data/establishments.db"),
                        help="Path to SQLite database file")

    args = parser.parse_args()

    if not args.db.exists():
        print(f"❌ Database file not found: {args.db}")
        sys.exit(1)

    success = audit(args.db)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
