"""
Command-line interface for the user upload tool.

Directives:
    --file FILE       CSV file to parse and load into the users table
    --dry_run         with --file: validate and report, never touch the database
    --create_table    (re)build the users table and take no further action
    --drop_table      drop the users table and take no further action
    --show_schema     print the users table definition and exit
"""

import argparse
import logging
import sys
from typing import List, Optional

import psycopg

from ..core.bulk_loader import BulkLoader
from ..core.csv_ingestor import CSVIngestor
from ..core.database_manager import DatabaseManager
from ..core.report import render, render_load_summary, render_storage_error
from ..core.users_table import drop, provision, users_schema
from ..exceptions import FileError, StorageError

EXAMPLE = "e.g. user-upload --file users.csv --dry_run -u user -p password -h localhost"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser. -h is the database host, not help."""
    p = argparse.ArgumentParser(
        prog="user-upload",
        description="Validate a CSV of users (name, surname, email) and load it into PostgreSQL",
        epilog=EXAMPLE,
        add_help=False)

    # Directives
    p.add_argument("--file", metavar="CSV", help="Name of the CSV file to be parsed")
    p.add_argument("--dry_run", action="store_true",
                   help="Use with --file: run everything except the database insert")
    p.add_argument("--create_table", action="store_true",
                   help="Build (or rebuild) the users table; no further action is taken. "
                        "Existing rows are lost")
    p.add_argument("--drop_table", action="store_true",
                   help="Drop the users table; no further action is taken. Use with extreme caution")
    p.add_argument("--show_schema", action="store_true",
                   help="Print the users table definition and exit")

    # Database connection
    p.add_argument("-u", dest="user", help="PostgreSQL username")
    p.add_argument("-p", dest="password", help="PostgreSQL password")
    p.add_argument("-h", dest="host", help="PostgreSQL host")
    p.add_argument("--port", type=int, help="PostgreSQL port (default: 5432)")
    p.add_argument("--dbname", help="Database name")
    p.add_argument("--env", default=".env", help="Path to .env file with DB settings (default: .env)")

    # Target table
    p.add_argument("--table", default="users", help="Target table name (default: users)")
    p.add_argument("--schema", default="public", help="Target schema name (default: public)")

    p.add_argument("--force", action="store_true",
                   help="Skip confirmation prompts for destructive operations")
    p.add_argument("--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--help", action="help", help="Show these directives and exit")

    return p


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments and reject conflicting directives."""
    parser = build_parser()
    args = parser.parse_args(argv)

    directives = [name for name in ("file", "create_table", "drop_table", "show_schema")
                  if getattr(args, name)]
    if not directives:
        parser.error("No directive given. Use --help for valid directives.")
    if len(directives) > 1:
        parser.error("Use only one of --file, --create_table, --drop_table, --show_schema")
    if args.dry_run and not args.file:
        parser.error("--dry_run can only be used with --file")

    return args


def confirm_action(message: str, force: bool = False) -> bool:
    """Ask for user confirmation unless force is True."""
    if force:
        return True

    response = input(f"{message} (y/N): ").strip().lower()
    return response in ('y', 'yes')


def open_database(args: argparse.Namespace) -> DatabaseManager:
    return DatabaseManager(
        env_path=args.env,
        host=args.host,
        port=args.port,
        dbname=args.dbname,
        user=args.user,
        password=args.password)


def run_create_table(args: argparse.Namespace) -> int:
    target = f"{args.schema}.{args.table}"
    if not confirm_action(f"Rebuild table {target}? Existing data will be deleted!", args.force):
        print("Operation cancelled.")
        return 0

    with open_database(args) as db:
        provision(db.get_connection(), args.table, args.schema)
    print(f"Table {target} created successfully.")
    return 0


def run_drop_table(args: argparse.Namespace) -> int:
    target = f"{args.schema}.{args.table}"
    if not confirm_action(f"Drop table {target}? This will delete all data!", args.force):
        print("Operation cancelled.")
        return 0

    with open_database(args) as db:
        if not db.table_exists(args.table, args.schema):
            print(f"Table {target} does not exist; nothing to drop.")
            return 0
        drop(db.get_connection(), args.table, args.schema)
    print(f"Table {target} dropped successfully.")
    return 0


def run_upload(args: argparse.Namespace) -> int:
    """Ingest the file, then either report (dry run) or load and report."""
    print(f"Processing CSV: {args.file}")
    result = CSVIngestor().ingest(args.file)

    if args.dry_run:
        print(render(result.valid_count, result.invalid))
        print("\nDry run: the database was not modified.")
        return 0

    loader = BulkLoader(args.table, args.schema)
    with open_database(args) as db:
        try:
            report = loader.load(result.valid, db.get_connection())
        except StorageError as e:
            print(render(result.valid_count, result.invalid))
            print()
            print(render_storage_error(e), file=sys.stderr)
            return 1

    print(render(result.valid_count, result.invalid))
    print()
    print(render_load_summary(report))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        if args.show_schema:
            print(users_schema(args.table, args.schema).to_sql())
            return 0
        if args.create_table:
            return run_create_table(args)
        if args.drop_table:
            return run_drop_table(args)
        return run_upload(args)

    except FileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except StorageError as e:
        print(render_storage_error(e, loading=False), file=sys.stderr)
        return 1
    except psycopg.Error as e:
        print(f"Error: database unavailable: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
