import argparse
from pathlib import Path

from sqlalchemy.exc import IntegrityError

from . import __version__
from .database import create_db_engine, init_database, get_session
from .env import load_env, db_path, booking_url
from .normalize import normalize_slug
from .resolver import SlugResolver, MalformedBaseError
from .schema import validate_slug
from .service import create_establishment, find_by_slug, rename, share_link
from .storage import EstablishmentStore, EstablishmentNotFound


def _open_store(args: argparse.Namespace) -> EstablishmentStore:
    path = Path(args.db) if args.db else db_path()
    engine = create_db_engine(path)
    init_database(path, engine=engine)
    return EstablishmentStore(get_session(path, engine=engine))


def _close_store(store: EstablishmentStore) -> None:
    engine = store.session.get_bind()
    store.session.close()
    engine.dispose()


def _print_establishment(establishment) -> None:
    print(f"ID: {establishment.id}")
    print(f"  Name: {establishment.name}")
    print(f"  Slug: {establishment.slug}")


def cmd_init(args: argparse.Namespace) -> None:
    path = Path(args.db) if args.db else db_path()
    init_database(path)
    print(f"Database ready: {path}")


def cmd_slug(args: argparse.Namespace) -> None:
    slug = normalize_slug(args.name)
    print(slug)
    errors = validate_slug(slug)
    if errors:
        print(f"Warning: base slug is not valid ({'; '.join(errors)})")


def cmd_validate(args: argparse.Namespace) -> None:
    errors = validate_slug(args.slug)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_create(args: argparse.Namespace) -> None:
    store = _open_store(args)
    try:
        resolver = SlugResolver(store.exists)
        establishment = create_establishment(store, resolver, args.name)
        print(f"ID: {establishment.id}")
        print(f"Slug: {establishment.slug}")
    except (ValueError, IntegrityError) as e:
        raise SystemExit(f"Could not create establishment: {e}")
    finally:
        _close_store(store)


def cmd_rename(args: argparse.Namespace) -> None:
    store = _open_store(args)
    try:
        resolver = SlugResolver(store.exists)
        slug = rename(store, resolver, args.id, args.name)
    except (MalformedBaseError, EstablishmentNotFound, IntegrityError) as e:
        raise SystemExit(f"Rename failed: {e}")
    finally:
        _close_store(store)
    print(f"Slug: {slug}")


def cmd_lookup(args: argparse.Namespace) -> None:
    store = _open_store(args)
    try:
        establishment = find_by_slug(store, args.slug)
        if establishment is None:
            print(f"Not found: {args.slug}")
            raise SystemExit(1)
        _print_establishment(establishment)
    finally:
        _close_store(store)


def cmd_list(args: argparse.Namespace) -> None:
    store = _open_store(args)
    try:
        establishments = store.list_all()
        if not establishments:
            print("No establishments in store.")
            return
        print(f"Found {len(establishments)} establishments:\n")
        for establishment in establishments:
            _print_establishment(establishment)
            print()
    finally:
        _close_store(store)


def cmd_link(args: argparse.Namespace) -> None:
    base = args.base_url or booking_url()
    if not base:
        raise SystemExit("BIZSLUG_BOOKING_URL not set. Set env var or pass --base-url.")
    print(share_link(base, args.slug))


def main(argv=None):
    load_env()
    parser = argparse.ArgumentParser(prog="bizslug", description="Establishment slug tools")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    ini = subparsers.add_parser("init", help="Create the establishments database")
    ini.add_argument("--db", help="Path to SQLite database (default: $BIZSLUG_DB or data/establishments.db)")
    ini.set_defaults(func=cmd_init)

    slg = subparsers.add_parser("slug", help="Print the base slug for a display name")
    slg.add_argument("--name", required=True, help="Display name, e.g. \"Salão & Spa\"")
    slg.set_defaults(func=cmd_slug)

    val = subparsers.add_parser("validate", help="Check a slug is 3-100 lower-case letters and digits")
    val.add_argument("--slug", required=True, help="Slug to validate")
    val.set_defaults(func=cmd_validate)

    cre = subparsers.add_parser("create", help="Create an establishment with a unique slug")
    cre.add_argument("--name", required=True, help="Display name")
    cre.add_argument("--db", help="Path to SQLite database")
    cre.set_defaults(func=cmd_create)

    ren = subparsers.add_parser("rename", help="Re-derive an establishment's slug from a new name")
    ren.add_argument("--id", required=True, help="Establishment id")
    ren.add_argument("--name", required=True, help="New display name")
    ren.add_argument("--db", help="Path to SQLite database")
    ren.set_defaults(func=cmd_rename)

    lku = subparsers.add_parser("lookup", help="Find an establishment by slug")
    lku.add_argument("--slug", required=True, help="Slug to look up")
    lku.add_argument("--db", help="Path to SQLite database")
    lku.set_defaults(func=cmd_lookup)

    lst = subparsers.add_parser("list", help="List all establishments")
    lst.add_argument("--db", help="Path to SQLite database")
    lst.set_defaults(func=cmd_list)

    lnk = subparsers.add_parser("link", help="Build the public booking link for a slug")
    lnk.add_argument("--slug", required=True, help="Establishment slug")
    lnk.add_argument("--base-url", help="Booking site base URL (or set BIZSLUG_BOOKING_URL)")
    lnk.set_defaults(func=cmd_link)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
