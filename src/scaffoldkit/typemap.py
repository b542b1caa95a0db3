"""Column type classification.

Maps SQL column types and Go source type tokens onto the fixed set of
:class:`TargetType` values. The mapping is total: anything unrecognized is
treated as text.
"""

from __future__ import annotations

import re

from .models import TargetType

_BASE_TYPE = re.compile(r"[A-Za-z]+")

_SQL_TYPES: dict[str, TargetType] = {
    **dict.fromkeys(
        ["VARCHAR", "CHAR", "NVARCHAR", "NCHAR", "CLOB", "TEXT", "STRING"],
        TargetType.TEXT,
    ),
    **dict.fromkeys(
        ["INT", "INTEGER", "TINYINT", "SMALLINT", "MEDIUMINT", "BIGINT"],
        TargetType.INTEGER,
    ),
    **dict.fromkeys(
        ["FLOAT", "DOUBLE", "REAL", "DECIMAL", "NUMERIC"],
        TargetType.FLOATING,
    ),
    **dict.fromkeys(
        ["DATE", "DATETIME", "TIMESTAMP", "TIME", "YEAR"],
        TargetType.TIMESTAMP,
    ),
    **dict.fromkeys(
        ["BINARY", "VARBINARY", "BLOB", "LONGBLOB", "MEDIUMBLOB", "TINYBLOB"],
        TargetType.BYTES,
    ),
    **dict.fromkeys(["BOOL", "BOOLEAN"], TargetType.BOOLEAN),
}

# Go source tokens, matched exactly before falling back to the SQL table
_GO_TYPES: dict[str, TargetType] = {
    "int8": TargetType.INTEGER,
    "int16": TargetType.INTEGER,
    "int32": TargetType.INTEGER,
    "int64": TargetType.INTEGER,
    "uint": TargetType.INTEGER,
    "uint8": TargetType.INTEGER,
    "uint16": TargetType.INTEGER,
    "uint32": TargetType.INTEGER,
    "uint64": TargetType.INTEGER,
    "byte": TargetType.INTEGER,
    "rune": TargetType.INTEGER,
    "float32": TargetType.FLOATING,
    "float64": TargetType.FLOATING,
    "time.time": TargetType.TIMESTAMP,
    "[]byte": TargetType.BYTES,
}


def classify(type_token: str) -> TargetType:
    """Classify a column type into a target type. Never raises."""
    token = (type_token or "").strip()
    go_match = _GO_TYPES.get(token.lower())
    if go_match is not None:
        return go_match

    match = _BASE_TYPE.match(token)
    if match is None:
        return TargetType.TEXT
    return _SQL_TYPES.get(match.group(0).upper(), TargetType.TEXT)
