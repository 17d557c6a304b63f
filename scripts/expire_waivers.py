"""
Report, and optionally delete, release waivers whose expiry has passed.

Usage examples:
  python scripts/expire_waivers.py
  python scripts/expire_waivers.py --delete --yes

Notes:
 - Uses app.config.settings for DATABASE_URL.
 - Without --delete nothing is modified.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Ensure we can import the app package when running as a script
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from app.core.database import SessionLocal, create_tables  # noqa: E402
from app.core.dependencies import container  # noqa: E402


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check release waivers for expiry")
    parser.add_argument("--delete", action="store_true", help="Delete the expired waivers")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation before deleting")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.delete and not args.yes:
        answer = input("Delete every expired waiver? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            print("Aborted.")
            return 1

    create_tables()
    db = SessionLocal()
    try:
        service = container.waiver_service(db)
        report = asyncio.run(service.check_expired_waivers(auto_delete=args.delete))
    finally:
        db.close()

    print(f"Checked at {report.checked_at.isoformat()}: {len(report.expired_waivers)} expired waiver(s)")
    for waiver in report.expired_waivers:
        print(f"  {waiver.id}  release={waiver.release_id}  {waiver.target_type.value}  expired {waiver.expires_at.isoformat()}")
    if args.delete:
        print(f"Deleted {report.deleted_count} waiver(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
