#!/usr/bin/env python3
"""Generate a bearer token for an existing account, for manual API testing.

Usage: python scripts/generate_test_token.py <account-id> [days]
"""
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.auth import create_access_token


def main() -> None:
    if len(sys.argv) < 2:
        sys.exit(__doc__)

    account_id = sys.argv[1]
    days = int(sys.argv[2]) if len(sys.argv) > 2 else None
    expires = timedelta(days=days) if days is not None else None

    token = create_access_token(account_id, expires_delta=expires)
    print(f"Token for {account_id}:\n{token}")


if __name__ == "__main__":
    main()
