"""
Issue a bearer token for local development.

Usage examples:
  SECRET_KEY=change-me python scripts/issue_token.py alice
  SECRET_KEY=change-me python scripts/issue_token.py bob --role qa --role release-manager --minutes 120
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure we can import the app package when running as a script
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from app.config.settings import settings  # noqa: E402
from app.core.security import create_access_token  # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Issue an HS256 access token")
    parser.add_argument("user_id", help="Value of the token's sub claim")
    parser.add_argument("--role", action="append", default=[], help="Role to include; repeatable")
    parser.add_argument("--minutes", type=int, default=None, help="Lifetime in minutes")
    args = parser.parse_args(argv)

    if not settings.secret_key:
        print("SECRET_KEY is not configured; tokens would not be verified.", file=sys.stderr)
        return 1

    print(create_access_token(args.user_id, roles=args.role, expires_minutes=args.minutes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
