"""Pydantic models for the HTTP service.

Amounts travel as decimal strings (Uint256) so values above 2**53 survive
JSON clients that parse numbers as floats.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from pairswap.events import Event
from pairswap.pool import LiquidityPool
from pairswap.types import Uint256


class CreatePairRequest(BaseModel):
    asset_a: str = Field(min_length=1, description="First asset identifier")
    asset_b: str = Field(min_length=1, description="Second asset identifier")


class PairInfo(BaseModel):
    """Public view of one pool."""

    pool_id: str
    asset_a: str
    asset_b: str
    reserve_a: Uint256
    reserve_b: Uint256
    total_supply: Uint256

    @classmethod
    def from_pool(cls, pool: LiquidityPool) -> PairInfo:
        reserve_a, reserve_b, total_supply = pool.get_state()
        return cls(
            pool_id=pool.pool_id,
            asset_a=pool.asset_a,
            asset_b=pool.asset_b,
            reserve_a=str(reserve_a),
            reserve_b=str(reserve_b),
            total_supply=str(total_supply),
        )


class QuoteResponse(BaseModel):
    pool_id: str
    from_asset: str
    to_asset: str
    amount_in: Uint256
    amount_out: Uint256


class AddLiquidityRequest(BaseModel):
    """Deposit in the pool's stored asset order (asset_a, asset_b)."""

    provider: str = Field(min_length=1)
    amount_a: Uint256
    amount_b: Uint256


class AddLiquidityResponse(BaseModel):
    pool_id: str
    provider: str
    minted_shares: Uint256
    pair: PairInfo


class RemoveLiquidityRequest(BaseModel):
    provider: str = Field(min_length=1)
    share_amount: Uint256


class RemoveLiquidityResponse(BaseModel):
    pool_id: str
    provider: str
    amount_a: Uint256
    amount_b: Uint256
    pair: PairInfo


class SwapRequest(BaseModel):
    trader: str = Field(min_length=1)
    from_asset: str = Field(min_length=1)
    amount_in: Uint256
    min_amount_out: Uint256 = "0"


class SwapResponse(BaseModel):
    pool_id: str
    trader: str
    from_asset: str
    to_asset: str
    amount_in: Uint256
    amount_out: Uint256
    pair: PairInfo


class ShareBalance(BaseModel):
    pool_id: str
    holder: str
    shares: Uint256
    total_supply: Uint256


class AssetBalance(BaseModel):
    holder: str
    asset: str
    balance: Uint256


class CreditRequest(BaseModel):
    asset: str = Field(min_length=1)
    amount: Uint256


class EventRecord(BaseModel):
    """One logged event. Integer fields are rendered as decimal strings."""

    seq: int
    event: str
    data: dict[str, Any]

    @classmethod
    def from_event(cls, event: Event) -> EventRecord:
        payload = event.to_dict()
        payload.pop("event")
        payload.pop("seq")
        data = {k: str(v) if isinstance(v, int) else v for k, v in payload.items()}
        return cls(seq=event.seq, event=event.name, data=data)


class EventsResponse(BaseModel):
    events: list[EventRecord]
    last_seq: int


class ErrorResponse(BaseModel):
    error: str
    detail: str
