"""DSN parsing and redaction utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from .redaction import REDACTED_VALUE, redact_query_params


@dataclass
class DSNConfig:
    scheme: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]
    path: str
    query: dict[str, str]

    @property
    def backend(self) -> str:
        """
        Database family without the driver suffix (``postgresql+psycopg`` -> ``postgresql``).
        """

        return self.scheme.split("+", 1)[0].lower()

    @property
    def driver(self) -> Optional[str]:
        _, _, driver = self.scheme.partition("+")
        return driver or None

    def redacted(self) -> str:
        """
        Return the DSN with credentials and sensitive query values masked.
        """

        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += f":{REDACTED_VALUE}"
            netloc += "@"
        if self.host:
            netloc += self.host
        if self.port:
            netloc += f":{self.port}"

        query_string = urlencode(redact_query_params(self.query), safe="*/") if self.query else ""

        # Keep the double slash even when netloc is empty (sqlite:///path).
        result = f"{self.scheme}://{netloc}{self.path or ''}"
        if query_string:
            result += f"?{query_string}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
    return DSNConfig(
        scheme=parsed.scheme,
        username=parsed.username,
        password=parsed.password,
        host=parsed.hostname,
        port=parsed.port,
        database=parsed.path.lstrip("/") or None,
        path=parsed.path or "",
        query=query,
    )
