"""
Connection configuration and SQLAlchemy engine construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import sqlalchemy
from sqlalchemy.engine import URL, Engine, make_url

from ..exceptions import ConfigurationError
from ..security.dsns import DSNConfig, parse_dsn

# Bare schemes resolve to the driver Waypoint ships extras for.
DEFAULT_DRIVERS = {
    "sqlite": "sqlite",
    "postgres": "postgresql+psycopg",
    "postgresql": "postgresql+psycopg",
    "mysql": "mysql+pymysql",
}


@dataclass
class SSLConfig:
    mode: str | None = None
    rootcert: str | None = None
    cert: str | None = None
    key: str | None = None
    ca: str | None = None
    check_hostname: bool | None = None

    def postgres_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.mode:
            options["sslmode"] = self.mode
        if self.rootcert:
            options["sslrootcert"] = self.rootcert
        if self.cert:
            options["sslcert"] = self.cert
        if self.key:
            options["sslkey"] = self.key
        return options

    def mysql_options(self) -> dict[str, Any]:
        ssl: dict[str, Any] = {}
        if self.ca:
            ssl["ca"] = self.ca
        if self.cert:
            ssl["cert"] = self.cert
        if self.key:
            ssl["key"] = self.key
        if self.check_hostname is not None:
            ssl["check_hostname"] = self.check_hostname
        return {"ssl": ssl} if ssl else {}

    def is_empty(self) -> bool:
        return not any(
            [self.mode, self.rootcert, self.cert, self.key, self.ca, self.check_hostname is not None]
        )


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


def _parse_int(value: str, *, key: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer value for '{key}': {value!r}") from exc


def _pop_bool(query: dict[str, str], key: str) -> bool | None:
    if key not in query:
        return None
    return _parse_bool(query.pop(key), key=key)


def _pop_float(query: dict[str, str], key: str) -> float | None:
    if key not in query:
        return None
    return _parse_float(query.pop(key), key=key)


_SSL_KEYS = {
    "sslmode": "mode",
    "sslrootcert": "rootcert",
    "sslcert": "cert",
    "sslkey": "key",
    "ssl_ca": "ca",
    "ssl_cert": "cert",
    "ssl_key": "key",
}


def _pop_ssl(query: dict[str, str]) -> SSLConfig | None:
    ssl = SSLConfig()
    for query_key, attr in _SSL_KEYS.items():
        if query_key in query:
            setattr(ssl, attr, query.pop(query_key))
    if "ssl_check_hostname" in query:
        ssl.check_hostname = _parse_bool(query.pop("ssl_check_hostname"), key="ssl_check_hostname")
    return None if ssl.is_empty() else ssl


def _parse_option_values(query: dict[str, str]) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for key, value in query.items():
        if key == "connect_timeout":
            options[key] = _parse_int(value, key=key)
        else:
            options[key] = value
    return options


@dataclass
class ConnectionConfig:
    """
    Normalized connection settings handed to SQLAlchemy when a context is built.
    """

    url: str
    autocommit: bool = False
    isolation_level: str | None = None
    timeout: float | None = None
    echo: bool = False
    options: dict[str, Any] | None = None
    ssl: SSLConfig | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a connection config by parsing the DSN string.

        Recognised query keys (``autocommit``, ``timeout``, ``isolation_level``,
        ``echo`` and the SSL family) become fields; everything else is kept in
        ``options`` and forwarded to the driver. Keyword arguments win over the
        DSN.
        """

        parsed = parse_dsn(dsn)
        query = dict(parsed.query)

        parsed_autocommit = _pop_bool(query, "autocommit")
        parsed_echo = _pop_bool(query, "echo")
        parsed_timeout = _pop_float(query, "timeout")
        parsed_isolation_level = query.pop("isolation_level", None)
        parsed_ssl = _pop_ssl(query)

        options = _parse_option_values(query)
        options.update(kwargs.pop("options", None) or {})

        autocommit = kwargs.pop("autocommit", parsed_autocommit)
        echo = kwargs.pop("echo", parsed_echo)

        return cls(
            url=dsn,
            dsn=parsed,
            autocommit=bool(autocommit),
            echo=bool(echo),
            isolation_level=kwargs.pop("isolation_level", parsed_isolation_level),
            timeout=kwargs.pop("timeout", parsed_timeout),
            options=options or None,
            ssl=kwargs.pop("ssl", parsed_ssl),
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from an environment variable containing a DSN.
        """

        value = os.getenv(env_var)
        if not value:
            raise ConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    @property
    def backend(self) -> str:
        return self._dsn().backend

    def redacted_dsn(self) -> str:
        """
        Return a DSN safe for logging (credentials removed).
        """

        return self._dsn().redacted()

    def descriptive_label(self) -> str:
        """
        Describe the config source for diagnostics.
        """

        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted

    # ------------------------------------------------------------------ #
    # SQLAlchemy translation
    # ------------------------------------------------------------------ #
    def sqlalchemy_url(self) -> URL:
        scheme = self._dsn().scheme.lower()
        if "+" in scheme:
            drivername = scheme
        else:
            try:
                drivername = DEFAULT_DRIVERS[scheme]
            except KeyError:
                raise ConfigurationError(f"Unsupported DSN scheme '{scheme}'") from None
        return make_url(self.url).set(drivername=drivername, query={})

    def connect_args(self) -> dict[str, Any]:
        backend = self.backend
        args: dict[str, Any] = {}
        if self.timeout is not None:
            if backend == "sqlite":
                args["timeout"] = self.timeout
            else:
                args["connect_timeout"] = int(self.timeout)
        if self.ssl is not None:
            if backend in ("postgres", "postgresql"):
                args.update(self.ssl.postgres_options())
            elif backend == "mysql":
                args.update(self.ssl.mysql_options())
        args.update(self.options or {})
        return args

    def engine_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {"echo": self.echo}
        if self.autocommit:
            options["isolation_level"] = "AUTOCOMMIT"
        elif self.isolation_level:
            options["isolation_level"] = self.isolation_level.replace("_", " ").upper()
        connect_args = self.connect_args()
        if connect_args:
            options["connect_args"] = connect_args
        return options

    def _dsn(self) -> DSNConfig:
        if self.dsn is None:
            self.dsn = parse_dsn(self.url)
        return self.dsn


def create_engine(config: ConnectionConfig) -> Engine:
    return sqlalchemy.create_engine(config.sqlalchemy_url(), **config.engine_options())
