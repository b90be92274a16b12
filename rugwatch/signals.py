"""Combine externally fetched token signals into one risk level.

Signals arrive already decoded from the explorer, holder and liquidity
lookups. Percentages keep the collaborator shape (``"25%"``); only the
numeric prefix is read. A bundle with missing or malformed fields is a
caller bug and raises :class:`SignalError` immediately.
"""

import logging
from collections.abc import Mapping

from pydantic import ValidationError

from .models import AggregateResult, RiskLevel, SignalError, Signals, parse_percentage

logger = logging.getLogger(__name__)

SELL_TAX_LIMIT = 10.0
HOLDER_SHARE_MEDIUM = 20.0
HOLDER_SHARE_HIGH = 50.0
LIQUIDITY_LOCK_MIN = 60.0

__all__ = [
    "SignalError",
    "aggregate",
    "from_mapping",
    "parse_percentage",
    "signals_from_reports",
]


def _signal_error(exc: ValidationError) -> SignalError:
    errors = exc.errors()
    missing = [str(e["loc"][0]) for e in errors if e["type"] == "missing"]
    if missing:
        return SignalError(f"missing signal fields: {', '.join(missing)}")
    return SignalError("; ".join(
        f"{'.'.join(str(part) for part in e['loc']) or 'bundle'}: {e['msg']}"
        for e in errors
    ))


def from_mapping(data: Mapping) -> Signals:
    """Build a validated :class:`Signals` from the camelCase wire shape."""
    try:
        return Signals.model_validate(data)
    except ValidationError as e:
        raise _signal_error(e) from e


def _build(**fields) -> Signals:
    try:
        return Signals(**fields)
    except ValidationError as e:
        raise _signal_error(e) from e


def aggregate(signals: Signals | Mapping) -> AggregateResult:
    """Raise the risk level over six ordered checks and keep every reason."""
    if not isinstance(signals, Signals):
        signals = from_mapping(signals)

    level = RiskLevel.LOW
    reasons: list[str] = []

    # 1. Honeypot
    if signals.honeypot:
        level = level.at_least(RiskLevel.HIGH)
        reasons.append("Contract identified as potential honeypot")

    # 2. Honeypot warnings, verbatim
    reasons.extend(signals.warnings)

    # 3. Sell tax
    if parse_percentage(signals.sell_tax, "sellTax") > SELL_TAX_LIMIT:
        level = level.at_least(RiskLevel.MEDIUM)
        reasons.append(f"High sell tax ({signals.sell_tax})")

    # 4. Holder concentration
    top_share = parse_percentage(signals.top_holder_share, "topHolderShare")
    if top_share > HOLDER_SHARE_HIGH:
        level = level.at_least(RiskLevel.HIGH)
        reasons.append(f"Top holder owns {signals.top_holder_share} of supply")
    elif top_share > HOLDER_SHARE_MEDIUM:
        level = level.at_least(RiskLevel.MEDIUM)
        reasons.append(f"Top holder owns {signals.top_holder_share} of supply")

    # 5. Liquidity lock
    if not signals.liquidity_locked:
        level = level.at_least(RiskLevel.HIGH)
        reasons.append("Liquidity is not locked")
    elif parse_percentage(signals.liquidity_lock_share, "liquidityLockShare") < LIQUIDITY_LOCK_MIN:
        level = level.at_least(RiskLevel.MEDIUM)
        reasons.append(f"Only {signals.liquidity_lock_share} of liquidity is locked")

    # 6. Verification
    if not signals.verified:
        level = level.at_least(RiskLevel.MEDIUM)
        reasons.append("Contract source code is not verified")

    logger.debug("Aggregated %d reasons into %s", len(reasons), level.name)
    return AggregateResult(level=level, reasons=tuple(reasons))


def _failed(report) -> bool:
    return not isinstance(report, Mapping) or report.get("status") == "error"


def _require(report: Mapping, key: str, source: str):
    try:
        return report[key]
    except (KeyError, TypeError):
        raise SignalError(f"{source} report is missing or malformed at {key!r}") from None


def _percent_or(value, default: str) -> str:
    try:
        parse_percentage(value)
    except SignalError:
        return default
    return value


def signals_from_reports(
    honeypot: Mapping | None,
    holders: Mapping | None,
    liquidity: Mapping | None,
    verified: bool | None,
) -> Signals:
    """Map decoded collaborator payloads to a signal bundle.

    Failed or missing lookups become risk-escalating values so an
    unavailable signal is never mistaken for a safe one.
    """
    if _failed(honeypot):
        logger.warning("Honeypot check unavailable; assuming honeypot")
        is_honeypot = True
        warnings = ("Unable to verify contract safety",)
        sell_tax = buy_tax = "0%"
        if isinstance(honeypot, Mapping):
            warnings = honeypot.get("warnings") or warnings
            sell_tax = _percent_or(honeypot.get("sellTax"), "0%")
            buy_tax = _percent_or(honeypot.get("buyTax"), "0%")
    else:
        is_honeypot = _require(honeypot, "isHoneypot", "honeypot")
        warnings = honeypot.get("warnings") or ()
        sell_tax = _require(honeypot, "sellTax", "honeypot")
        buy_tax = _require(honeypot, "buyTax", "honeypot")

    if _failed(holders):
        logger.warning("Holder lookup unavailable; assuming full concentration")
        top_share = "100%"
    else:
        entries = holders.get("holders") or []
        top_share = _require(entries[0], "percentage", "holders") if entries else "0%"

    if _failed(liquidity):
        logger.warning("Liquidity lookup unavailable; assuming unlocked")
        locked, lock_share = False, "0%"
    else:
        info = liquidity.get("liquidity", liquidity)
        locked = _require(info, "liquidityLocked", "liquidity")
        lock_share = _require(info, "lockPercentage", "liquidity")

    if verified is not None and not isinstance(verified, bool):
        raise SignalError(f"verified: expected a boolean or None, got {type(verified).__name__}")

    return _build(
        honeypot=is_honeypot,
        sell_tax=sell_tax,
        buy_tax=buy_tax,
        top_holder_share=top_share,
        liquidity_locked=locked,
        liquidity_lock_share=lock_share,
        verified=verified is True,
        warnings=warnings,
    )
