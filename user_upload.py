#!/usr/bin/env python3
"""
User Upload

Command-line wrapper: validates a users CSV and loads it into PostgreSQL.
Run with --help for the list of directives.
"""

import sys

from userupload.cli.user_upload_cli import main

if __name__ == "__main__":
    sys.exit(main())
