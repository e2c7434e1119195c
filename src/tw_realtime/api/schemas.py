"""Inbound live-channel messages."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ClientMessage(BaseModel):
    """{type: "auth", token} | {type: "subscribe"|"unsubscribe", tournamentId} | {type: "ping"}"""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["auth", "subscribe", "unsubscribe", "ping"]
    tournament_id: int | None = Field(None, alias="tournamentId")
    token: str | None = None
