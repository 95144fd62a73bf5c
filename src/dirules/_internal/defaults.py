from __future__ import annotations

import datetime
import decimal
import pathlib
import uuid
from typing import Any

WILDCARD_RULE_ID = "*"
"""Identifier of the rule every other rule falls back to."""

NEVER_AUTOWIRED_TYPES: tuple[type[Any], ...] = (
    pathlib.PurePath,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    decimal.Decimal,
)
"""Value types that are never built by the container just because a parameter names them."""
