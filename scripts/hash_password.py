"""Print a password hash suitable for system_accounts.password_hash.

Usage:
    python scripts/hash_password.py <password>
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from billing_api.utils.security import hash_password


def main() -> int:
    parser = argparse.ArgumentParser(description="Hash an operator password")
    parser.add_argument("password")
    args = parser.parse_args()
    print(hash_password(args.password))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
