"""Small response envelopes and update helpers shared by several routers."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


class DeleteResponse(BaseModel):
    message: str
    id: int


def update_changes(body: BaseModel, clearable: frozenset[str] = frozenset()) -> dict[str, Any]:
    """Fields the client sent in a partial update.

    An explicit ``null`` clears a field listed in *clearable*; on any other
    field it is ignored, since those columns are NOT NULL.
    """
    return {
        field: value
        for field, value in body.model_dump(exclude_unset=True).items()
        if value is not None or field in clearable
    }
