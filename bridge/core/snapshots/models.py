from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


class SnapshotValidationError(ValueError):
    """Raised when a snapshot payload cannot be accepted."""


class MarketPosition(str, Enum):
    FLAT = "Flat"
    LONG = "Long"
    SHORT = "Short"


@dataclass(frozen=True)
class Position:
    instrument: str
    market_position: MarketPosition
    quantity: int
    average_price: float = 0.0
    unrealized: float = 0.0
    current_price: float = 0.0
    symbol: str = ""

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "instrument": self.instrument,
            "marketPosition": self.market_position.value,
            "quantity": self.quantity,
            "averagePrice": self.average_price,
            "unrealized": self.unrealized,
            "currentPrice": self.current_price,
        }
        if self.symbol:
            payload["symbol"] = self.symbol
        return payload


@dataclass(frozen=True)
class WorkingOrder:
    order_id: str
    instrument: str
    order_type: str
    order_action: str
    quantity: int
    filled: int = 0
    limit_price: float = 0.0
    stop_price: float = 0.0
    state: str = ""
    name: str = ""
    oco: str = ""
    is_stop_loss: bool = False
    is_profit_target: bool = False

    def to_wire(self) -> dict[str, Any]:
        return {
            "orderId": self.order_id,
            "instrument": self.instrument,
            "orderType": self.order_type,
            "orderAction": self.order_action,
            "quantity": self.quantity,
            "filled": self.filled,
            "limitPrice": self.limit_price,
            "stopPrice": self.stop_price,
            "state": self.state,
            "name": self.name,
            "oco": self.oco,
            "isStopLoss": self.is_stop_loss,
            "isProfitTarget": self.is_profit_target,
        }


@dataclass(frozen=True)
class Snapshot:
    account: str
    timestamp: Optional[datetime] = None
    balance: float = 0.0
    realized: float = 0.0
    unrealized: float = 0.0
    positions: tuple[Position, ...] = field(default_factory=tuple)
    working_orders: tuple[WorkingOrder, ...] = field(default_factory=tuple)

    def to_wire(self) -> dict[str, Any]:
        return {
            "timestamp": _format_timestamp(self.timestamp),
            "account": self.account,
            "balance": self.balance,
            "realized": self.realized,
            "unrealized": self.unrealized,
            "positions": [position.to_wire() for position in self.positions],
            "workingOrders": [order.to_wire() for order in self.working_orders],
        }


def parse_snapshot(payload: object) -> Snapshot:
    """
    Build a Snapshot from the trading application's JSON object.

    Absent fields fall back to zero values; present fields must carry the
    right JSON type. The account must be non-empty.
    """
    if not isinstance(payload, Mapping):
        raise SnapshotValidationError("snapshot must be a JSON object")
    account = _get_str(payload, "account")
    if not account.strip():
        raise SnapshotValidationError("account is required")
    positions = _get_list(payload, "positions")
    orders = _get_list(payload, "workingOrders")
    return Snapshot(
        account=account,
        timestamp=_parse_timestamp(payload.get("timestamp")),
        balance=_get_float(payload, "balance"),
        realized=_get_float(payload, "realized"),
        unrealized=_get_float(payload, "unrealized"),
        positions=tuple(_parse_position(item) for item in positions),
        working_orders=tuple(_parse_working_order(item) for item in orders),
    )


def parse_snapshot_table(payload: object) -> dict[str, Snapshot]:
    if not isinstance(payload, Mapping):
        raise SnapshotValidationError("snapshot table must be a JSON object")
    table: dict[str, Snapshot] = {}
    for account, raw in payload.items():
        snapshot = parse_snapshot(raw)
        if snapshot.account != account:
            raise SnapshotValidationError(
                f"snapshot keyed as {account!r} reports account {snapshot.account!r}"
            )
        table[account] = snapshot
    return table


def _parse_position(payload: object) -> Position:
    if not isinstance(payload, Mapping):
        raise SnapshotValidationError("position must be a JSON object")
    raw_side = _get_str(payload, "marketPosition") or MarketPosition.FLAT.value
    try:
        side = MarketPosition(raw_side.strip().capitalize())
    except ValueError as exc:
        raise SnapshotValidationError(f"unknown marketPosition {raw_side!r}") from exc
    return Position(
        instrument=_get_str(payload, "instrument"),
        symbol=_get_str(payload, "symbol"),
        market_position=side,
        quantity=_get_int(payload, "quantity"),
        average_price=_get_float(payload, "averagePrice"),
        unrealized=_get_float(payload, "unrealized"),
        current_price=_get_float(payload, "currentPrice"),
    )


def _parse_working_order(payload: object) -> WorkingOrder:
    if not isinstance(payload, Mapping):
        raise SnapshotValidationError("working order must be a JSON object")
    return WorkingOrder(
        order_id=_get_str(payload, "orderId"),
        instrument=_get_str(payload, "instrument"),
        order_type=_get_str(payload, "orderType"),
        order_action=_get_str(payload, "orderAction"),
        quantity=_get_int(payload, "quantity"),
        filled=_get_int(payload, "filled"),
        limit_price=_get_float(payload, "limitPrice"),
        stop_price=_get_float(payload, "stopPrice"),
        state=_get_str(payload, "state"),
        name=_get_str(payload, "name"),
        oco=_get_str(payload, "oco"),
        is_stop_loss=_get_bool(payload, "isStopLoss"),
        is_profit_target=_get_bool(payload, "isProfitTarget"),
    )


def _get_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SnapshotValidationError(f"{key} must be a string")
    return value


def _get_float(payload: Mapping[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotValidationError(f"{key} must be a number")
    try:
        number = float(value)
    except OverflowError as exc:
        raise SnapshotValidationError(f"{key} is out of range") from exc
    if not math.isfinite(number):
        raise SnapshotValidationError(f"{key} must be a finite number")
    return number


def _get_int(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotValidationError(f"{key} must be an integer")
    return value


def _get_bool(payload: Mapping[str, Any], key: str) -> bool:
    value = payload.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise SnapshotValidationError(f"{key} must be a boolean")
    return value


def _get_list(payload: Mapping[str, Any], key: str) -> list[Any]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise SnapshotValidationError(f"{key} must be a list")
    return value


def _parse_timestamp(value: object) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise SnapshotValidationError("timestamp must be an ISO-8601 string")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # .NET round-trip timestamps carry 7 fractional digits.
    text = _EXCESS_FRACTION.sub(r"\1", text)
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise SnapshotValidationError(f"invalid timestamp {value!r}") from exc


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")
