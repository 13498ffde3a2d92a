"""Allocation engine — positions → crypto/stable snapshot, drift against target."""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..config import AllocationConfig
from ..models import AllocationSnapshot, Constituent, Position

OTHER_SYMBOL = "Other"

CRYPTO = "crypto"
STABLE = "stable"

_DEFAULT_ALLOCATION = AllocationConfig()


def classify_position(
    position: Position, config: AllocationConfig = _DEFAULT_ALLOCATION
) -> str | None:
    """Return ``"crypto"``, ``"stable"`` or None for positions outside the ratio.

    Debt and negative-value positions belong to the borrowing view and are
    excluded. An explicit crypto/stable category wins over the symbol table.
    """
    category = position.category.lower()
    if category in config.debt_types or position.usd_value < 0:
        return None
    if category in (CRYPTO, STABLE):
        return category
    if position.symbol.upper() in config.stable_symbols:
        return STABLE
    return CRYPTO


def _pct(part: float, whole: float) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def _join_unique(values: Iterable[str]) -> str:
    return ", ".join(sorted({v for v in values if v}))


def build_constituents(positions: Sequence[Position]) -> list[Constituent]:
    """Group positions by symbol and weight each group within the bucket."""
    grouped: dict[str, list[Position]] = {}
    for position in positions:
        grouped.setdefault(position.symbol.upper(), []).append(position)

    bucket_total = sum(p.usd_value for p in positions)
    constituents = [
        Constituent(
            symbol=symbol,
            value_usd=sum(p.usd_value for p in group),
            weight_pct=_pct(sum(p.usd_value for p in group), bucket_total),
            chain=_join_unique(p.chain for p in group),
            protocol=_join_unique(p.protocol_name or p.protocol_id for p in group),
        )
        for symbol, group in grouped.items()
    ]
    constituents.sort(key=lambda c: (-c.value_usd, c.symbol))
    return constituents


def build_simplified_crypto(
    crypto: Sequence[Constituent], total_usd: float, top_n: int
) -> list[Constituent]:
    """Top-N crypto constituents plus an "Other" roll-up of the long tail.

    Weights are relative to the whole portfolio, so they add up to the
    crypto percentage. ``crypto`` must already be sorted by value.
    """
    head = [
        Constituent(
            symbol=c.symbol,
            value_usd=c.value_usd,
            weight_pct=_pct(c.value_usd, total_usd),
            chain=c.chain,
            protocol=c.protocol,
        )
        for c in crypto[:top_n]
    ]
    tail = crypto[top_n:]
    if tail:
        tail_value = sum(c.value_usd for c in tail)
        head.append(
            Constituent(
                symbol=OTHER_SYMBOL,
                value_usd=tail_value,
                weight_pct=_pct(tail_value, total_usd),
            )
        )
    return head


def calculate_allocation(
    positions: Sequence[Position], config: AllocationConfig = _DEFAULT_ALLOCATION
) -> AllocationSnapshot:
    """Aggregate positions into a crypto/stable allocation snapshot."""
    buckets: dict[str, list[Position]] = {CRYPTO: [], STABLE: []}
    for position in positions:
        bucket = classify_position(position, config)
        if bucket is not None:
            buckets[bucket].append(position)

    crypto_total = sum(p.usd_value for p in buckets[CRYPTO])
    stable_total = sum(p.usd_value for p in buckets[STABLE])
    total = crypto_total + stable_total

    if total <= 0:
        return AllocationSnapshot()

    crypto = build_constituents(buckets[CRYPTO])
    stable = build_constituents(buckets[STABLE])

    return AllocationSnapshot(
        crypto_pct=_pct(crypto_total, total),
        stable_pct=_pct(stable_total, total),
        crypto_constituents=tuple(crypto),
        stable_constituents=tuple(stable),
        simplified_crypto=tuple(build_simplified_crypto(crypto, total, config.top_n)),
        crypto_total_usd=crypto_total,
        stable_total_usd=stable_total,
    )


def calculate_delta(current_crypto_pct: float, target_crypto_pct: float) -> float:
    """Signed drift; positive means over-allocated to crypto."""
    return current_crypto_pct - target_crypto_pct


def count_unique_protocols(positions: Iterable[Position]) -> int:
    return len({p.protocol_id for p in positions})


def count_unique_chains(positions: Iterable[Position]) -> int:
    return len({p.chain for p in positions})
