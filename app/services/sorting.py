from __future__ import annotations

import re
from typing import Any, Sequence, TypeVar

from fastapi import HTTPException, status
from pydantic import BaseModel


RowT = TypeVar("RowT", bound=BaseModel)

_DIGITS = re.compile(r"(\d+)")


def _text_key(value: str) -> tuple:
    # "SKU-2" sorts before "SKU-10"; odd positions of the split are digit runs.
    parts = _DIGITS.split(value.casefold())
    return tuple(
        (0, int(part), "") if index % 2 else (1, 0, part)
        for index, part in enumerate(parts)
        if part
    )


def sort_rows(rows: Sequence[RowT], sort_by: str | None, sort_dir: str = "asc") -> list[RowT]:
    """Sort report rows by any field; ``None`` values always go last."""
    if not sort_by:
        return list(rows)

    if sort_dir not in ("asc", "desc"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid sort_dir '{sort_dir}', must be 'asc' or 'desc'",
        )

    if rows and sort_by not in type(rows[0]).model_fields:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot sort by unknown field '{sort_by}'",
        )

    present = [r for r in rows if getattr(r, sort_by) is not None]
    missing = [r for r in rows if getattr(r, sort_by) is None]

    def key(row: RowT) -> Any:
        value = getattr(row, sort_by)
        if isinstance(value, str):
            return _text_key(value)
        return value

    present.sort(key=key, reverse=sort_dir == "desc")
    return present + missing
