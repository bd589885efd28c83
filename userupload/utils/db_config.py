"""
Connection settings for the users database.

Settings come from, in order of precedence: explicit overrides (the
-u/-p/-h/--port/--dbname options), then a .env file and the process
environment. A full DSN in the environment is used only when no override
was given.
"""

import os
import re
from typing import Any, Dict, Optional

from dotenv import load_dotenv

DSN_VARS = ("DATABASE_URL", "POSTGRES_URL", "DB_URL")

# setting -> (environment names, default, command-line option)
SETTINGS = {
    "host": (("PGHOST", "DB_HOST"), "localhost", "-h"),
    "port": (("PGPORT", "DB_PORT"), "5432", "--port"),
    "dbname": (("PGDATABASE", "DB_NAME"), None, "--dbname"),
    "user": (("PGUSER", "DB_USER"), None, "-u"),
    "password": (("PGPASSWORD", "DB_PASSWORD"), None, "-p"),
}

_DSN_PASSWORD = re.compile(r"(://[^:/@]+:)[^@]*@")


def _first_env(names) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


class DatabaseConfig:
    """Resolves psycopg connection parameters for one run."""

    def __init__(self, env_path: Optional[str] = None, **overrides):
        self.env_path = env_path or ".env"
        self.overrides = {k: v for k, v in overrides.items() if v not in (None, "")}
        self._params: Optional[Dict[str, Any]] = None

    def load_config(self) -> Dict[str, Any]:
        """Resolve the connection parameters.

        Returns:
            Either ``{"dsn": ...}`` or keyword arguments for psycopg.connect()

        Raises:
            SystemExit: If dbname, user or password cannot be resolved
        """
        if os.path.exists(self.env_path):
            load_dotenv(self.env_path, override=True)

        dsn = _first_env(DSN_VARS)
        if dsn and not self.overrides:
            self._params = {"dsn": dsn}
            return self._params

        params = {}
        missing = []
        for key, (env_names, default, option) in SETTINGS.items():
            value = self.overrides.get(key) or _first_env(env_names) or default
            if value is None:
                missing.append(f"{'/'.join(env_names)} ({option})")
            params[key] = value

        if missing:
            raise SystemExit(
                f"Missing database settings: {', '.join(missing)}.\n"
                f"Pass the options shown, set {DSN_VARS[0]}, or add the variables to {self.env_path}.")

        params["port"] = int(params["port"])
        self._params = params
        return params

    def get_connection_params(self) -> Dict[str, Any]:
        if self._params is None:
            self.load_config()
        return dict(self._params)

    def __repr__(self) -> str:
        params = self.get_connection_params()
        if "dsn" in params:
            masked = _DSN_PASSWORD.sub(r"\g<1>***@", params["dsn"])
            return f"DatabaseConfig(dsn='{masked}')"
        params["password"] = "***"
        return f"DatabaseConfig({params})"
