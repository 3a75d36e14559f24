from __future__ import annotations

import argparse
import os
from pathlib import Path

from libvault.core.config import get_settings
from libvault.db.init_db import initialize_database
from libvault.db.models import LibraryType
from libvault.db.session import get_session_factory
from libvault.libraries.access import DatabaseAccessGate
from libvault.libraries.service import LibraryService
from libvault.users.service import UserService


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a user and print an API token for it")
    parser.add_argument("--state-root", default=None, help="State root directory (defaults to LIBVAULT_STATE_ROOT)")
    parser.add_argument("--username", required=True, help="Login name")
    parser.add_argument("--first-name", default="", help="Given name")
    parser.add_argument("--last-name", default="", help="Family name")
    parser.add_argument("--library-root", default=None, help="Also create a library rooted here (admins only)")
    parser.add_argument("--library-name", default=None, help="Name for the library created with --library-root")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if args.state_root:
        Path(args.state_root).mkdir(parents=True, exist_ok=True)
        os.environ["LIBVAULT_STATE_ROOT"] = Path(args.state_root).resolve().as_posix()
        get_settings.cache_clear()

    initialize_database()
    settings = get_settings()
    session_factory = get_session_factory()

    users = UserService(settings, session_factory)
    user = users.create_user(username=args.username, first_name=args.first_name, last_name=args.last_name)
    token = users.issue_token(user.id)
    print(f"user_id={user.id} username={user.username} admin={user.is_admin}")
    print(f"token={token}")

    if args.library_root:
        libraries = LibraryService(settings, session_factory, DatabaseAccessGate(session_factory))
        library = libraries.create_library(
            user,
            name=args.library_name or Path(args.library_root).name or "Library",
            root_folder=args.library_root,
            library_type=LibraryType.GENERIC,
        )
        print(f"library_id={library.id} root_folder={library.root_folder.as_posix()}")


if __name__ == "__main__":
    main()
