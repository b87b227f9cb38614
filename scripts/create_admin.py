#!/usr/bin/env python
"""Create an admin account for the tours admin panel.

        python ./scripts/create_admin.py --username admin --email admin@campus.edu

The password is read from ADMIN_PASSWORD or prompted for.
"""

import argparse
import getpass
import os
import sys

proj_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if proj_root not in sys.path:
    sys.path.insert(0, proj_root)

from campus_tours import create_app, db  # noqa: E402
from campus_tours.models.user import User  # noqa: E402


def create_admin(username, email, password, role="Admin"):
    app = create_app(os.environ.get("FLASK_CONFIG", "production"))

    with app.app_context():
        existing = User.query.filter_by(username=username).first()
        if existing:
            print(f"User '{username}' already exists")
            return existing

        user = User(username=username, email=email, role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        print(f"{role} user '{username}' created")
        return user


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--username", default="admin")
    parser.add_argument("--email", required=True)
    parser.add_argument("--role", choices=["Admin", "Staff"], default="Admin")
    args = parser.parse_args(argv)

    password = os.environ.get("ADMIN_PASSWORD") or getpass.getpass("Password: ")
    if not password:
        parser.error("a password is required")
    create_admin(args.username, args.email, password, role=args.role)


if __name__ == "__main__":
    main()
