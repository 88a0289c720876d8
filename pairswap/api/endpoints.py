"""API endpoints for the pool engine."""

import os

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from pairswap.engine import Engine, get_default_engine
from pairswap.errors import PairNotFound
from pairswap.models import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    AssetBalance,
    CreatePairRequest,
    CreditRequest,
    EventRecord,
    EventsResponse,
    PairInfo,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    ShareBalance,
    SwapRequest,
    SwapResponse,
)
from pairswap.pool import LiquidityPool

logger = structlog.get_logger()

router = APIRouter()

# Test-fund minting through POST /accounts/{holder}/credit
ENABLE_FAUCET = os.environ.get("PAIRSWAP_ENABLE_FAUCET", "false").lower() in ("true", "1", "yes")


def get_engine() -> Engine:
    """Dependency provider for the engine.

    Override this in tests to inject a fresh engine:
        app.dependency_overrides[get_engine] = lambda: engine
    """
    return get_default_engine()


def get_faucet_enabled() -> bool:
    return ENABLE_FAUCET


def _require_pair(engine: Engine, asset_a: str, asset_b: str) -> LiquidityPool:
    pool = engine.registry.get_pair(asset_a, asset_b)
    if pool is None:
        raise PairNotFound(f"No pool for {asset_a}/{asset_b}")
    return pool


@router.post("/pairs", status_code=status.HTTP_201_CREATED)
def create_pair(body: CreatePairRequest, engine: Engine = Depends(get_engine)) -> PairInfo:
    pool = engine.registry.create_pair(body.asset_a, body.asset_b)
    return PairInfo.from_pool(pool)


@router.get("/pairs")
def list_pairs(engine: Engine = Depends(get_engine)) -> list[PairInfo]:
    return [PairInfo.from_pool(pool) for pool in engine.registry.list_pairs()]


@router.get("/pairs/{asset_a}/{asset_b}")
def get_pair(asset_a: str, asset_b: str, engine: Engine = Depends(get_engine)) -> PairInfo:
    return PairInfo.from_pool(_require_pair(engine, asset_a, asset_b))


@router.get("/pools/{pool_id}")
def get_pool(pool_id: str, engine: Engine = Depends(get_engine)) -> PairInfo:
    pool = engine.registry.get_pool(pool_id)
    if pool is None:
        raise PairNotFound(f"No pool with id {pool_id}")
    return PairInfo.from_pool(pool)


@router.get("/pairs/{asset_a}/{asset_b}/quote")
def quote(
    asset_a: str,
    asset_b: str,
    from_asset: str = Query(min_length=1),
    amount_in: int = Query(),
    engine: Engine = Depends(get_engine),
) -> QuoteResponse:
    pool = _require_pair(engine, asset_a, asset_b)
    amount_out = pool.quote(from_asset, amount_in)
    return QuoteResponse(
        pool_id=pool.pool_id,
        from_asset=from_asset,
        to_asset=pool.other_asset(from_asset),
        amount_in=str(amount_in),
        amount_out=str(amount_out),
    )


@router.post("/pairs/{asset_a}/{asset_b}/liquidity")
def add_liquidity(
    asset_a: str,
    asset_b: str,
    body: AddLiquidityRequest,
    engine: Engine = Depends(get_engine),
) -> AddLiquidityResponse:
    """Deposit into a pool.

    amount_a and amount_b follow the pool's stored asset order, not the
    order of the assets in the URL.
    """
    pool = _require_pair(engine, asset_a, asset_b)
    minted = pool.add_liquidity(body.provider, int(body.amount_a), int(body.amount_b))
    return AddLiquidityResponse(
        pool_id=pool.pool_id,
        provider=body.provider,
        minted_shares=str(minted),
        pair=PairInfo.from_pool(pool),
    )


@router.post("/pairs/{asset_a}/{asset_b}/liquidity/remove")
def remove_liquidity(
    asset_a: str,
    asset_b: str,
    body: RemoveLiquidityRequest,
    engine: Engine = Depends(get_engine),
) -> RemoveLiquidityResponse:
    pool = _require_pair(engine, asset_a, asset_b)
    amount_a, amount_b = pool.remove_liquidity(body.provider, int(body.share_amount))
    return RemoveLiquidityResponse(
        pool_id=pool.pool_id,
        provider=body.provider,
        amount_a=str(amount_a),
        amount_b=str(amount_b),
        pair=PairInfo.from_pool(pool),
    )


@router.post("/pairs/{asset_a}/{asset_b}/swap")
def swap(
    asset_a: str,
    asset_b: str,
    body: SwapRequest,
    engine: Engine = Depends(get_engine),
) -> SwapResponse:
    pool = _require_pair(engine, asset_a, asset_b)
    amount_out = pool.swap(
        body.trader,
        body.from_asset,
        int(body.amount_in),
        int(body.min_amount_out),
    )
    return SwapResponse(
        pool_id=pool.pool_id,
        trader=body.trader,
        from_asset=body.from_asset,
        to_asset=pool.other_asset(body.from_asset),
        amount_in=body.amount_in,
        amount_out=str(amount_out),
        pair=PairInfo.from_pool(pool),
    )


@router.get("/pairs/{asset_a}/{asset_b}/shares/{holder}")
def share_balance(
    asset_a: str,
    asset_b: str,
    holder: str,
    engine: Engine = Depends(get_engine),
) -> ShareBalance:
    pool = _require_pair(engine, asset_a, asset_b)
    return ShareBalance(
        pool_id=pool.pool_id,
        holder=holder,
        shares=str(pool.share_balance(holder)),
        total_supply=str(pool.total_supply),
    )


@router.get("/events")
def events(since: int = Query(default=0, ge=0), engine: Engine = Depends(get_engine)) -> EventsResponse:
    """Events with sequence number greater than ``since``."""
    records = [EventRecord.from_event(e) for e in engine.events.events(since=since)]
    last_seq = records[-1].seq if records else since
    return EventsResponse(events=records, last_seq=last_seq)


@router.get("/accounts/{holder}/balances/{asset}")
def asset_balance(holder: str, asset: str, engine: Engine = Depends(get_engine)) -> AssetBalance:
    return AssetBalance(
        holder=holder,
        asset=asset,
        balance=str(engine.bank.balance_of(asset, holder)),
    )


@router.post("/accounts/{holder}/credit")
def credit(
    holder: str,
    body: CreditRequest,
    engine: Engine = Depends(get_engine),
    faucet_enabled: bool = Depends(get_faucet_enabled),
) -> AssetBalance:
    """Mint test funds into an account. Disabled unless PAIRSWAP_ENABLE_FAUCET is set."""
    if not faucet_enabled:
        logger.warning("faucet_disabled", holder=holder, asset=body.asset)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Faucet is disabled")
    balance = engine.bank.credit(body.asset, holder, int(body.amount))
    return AssetBalance(holder=holder, asset=body.asset, balance=str(balance))
