"""
Named parameters for raw SQL statements.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from sqlalchemy import TextClause, bindparam, text
from sqlalchemy.types import TypeEngine

from ..security.redaction import redact_value


@dataclass(frozen=True)
class SqlParameter:
    """
    A value bound to ``:name`` in a textual statement.

    ``type_`` is an optional SQLAlchemy type used both for binding and in log output.
    """

    name: str
    value: Any
    type_: Optional[TypeEngine | type] = None

    def describe(self) -> str:
        type_name = self._type_name()
        return f"{self.name} : {redact_value(self.value, key=self.name)} : {type_name}\t"

    def _type_name(self) -> str:
        if self.type_ is None:
            return type(self.value).__name__
        if isinstance(self.type_, type):
            return self.type_.__name__
        return repr(self.type_)


def describe_parameters(params: Sequence[SqlParameter]) -> str:
    return ",".join(param.describe() for param in params)


def bind_statement(sql: str, params: Sequence[SqlParameter]) -> tuple[TextClause, Dict[str, Any]]:
    statement = text(sql)
    typed = [bindparam(param.name, type_=param.type_) for param in params if param.type_ is not None]
    if typed:
        statement = statement.bindparams(*typed)
    return statement, {param.name: param.value for param in params}
