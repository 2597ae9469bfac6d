"""
Create an admin principal.

Registration through the API defaults to the telecaller role; this script is the
operator path for bootstrapping the first administrator.

Usage:
    python scripts/create_admin.py --name "Ops Admin" --email admin@example.com
    (the password is prompted for)
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add parent directory to path so we can import from services
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.errors import LeadDeskError
from domain.principal import Role
from services.auth_service import register


def create_admin(name: str, email: str, password: str) -> int:
    """Create the admin. Returns a process exit code."""
    try:
        principal = register(name, email, password, Role.ADMIN.value)
    except LeadDeskError as e:
        print(f"[ERROR] Failed to create admin: {e.message}")
        return 1

    print("[SUCCESS] Admin created successfully!")
    print(f"  User ID: {principal.id}")
    print(f"  Name: {principal.name}")
    print(f"  Email: {principal.email}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an admin principal")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        print("[ERROR] Passwords do not match")
        return 1
    return create_admin(args.name, args.email, password)


if __name__ == "__main__":
    sys.exit(main())
