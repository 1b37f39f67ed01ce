"""Inbound Socket.IO payloads.

Each client command has its own model; payloads are parsed here before any
game code sees them, so handlers only deal with typed, bounded values.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Command(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class JoinGame(Command):
    stake_amount: float = Field(0, ge=0, alias='stakeAmount')
    identity: Optional[str] = Field(None, alias='publicKey', max_length=128)
    is_test_mode: bool = Field(False, alias='isTestMode')

    @field_validator('stake_amount', mode='before')
    @classmethod
    def _none_stake_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator('identity', mode='before')
    @classmethod
    def _blank_identity_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class RevealTile(Command):
    game_id: int = Field(..., alias='gameId')
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)


class ChatLine(Command):
    game_id: int = Field(..., alias='gameId')
    message: str = Field(..., min_length=1)


class AvatarReaction(Command):
    game_id: int = Field(..., alias='gameId')
    reaction: str = Field(..., min_length=1, max_length=32)

