"""Data models for exchange executions."""

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

# 9999-12-31 23:59:59.999 UTC, the last instant datetime can represent
MAX_TIMESTAMP_MS = 253_402_300_799_999


class Side(str, Enum):
    """Execution side as reported by the exchange."""

    BUY = "Buy"
    SELL = "Sell"


class Execution(BaseModel):
    """A single spot fill.

    Field aliases follow the Bybit v5 execution payload, where numeric
    values arrive as strings. Fields can also be populated by name.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    symbol: str = Field(min_length=1)
    side: Side
    quantity: Decimal = Field(alias="execQty", gt=0, allow_inf_nan=False)
    price: Decimal = Field(alias="execPrice", gt=0, allow_inf_nan=False)
    fee: Decimal = Field(default=Decimal("0"), alias="execFee", ge=0, allow_inf_nan=False)
    timestamp: int = Field(alias="execTime", ge=0, le=MAX_TIMESTAMP_MS)
    execution_id: str | None = Field(default=None, alias="execId")

    @field_validator("fee", mode="before")
    @classmethod
    def _blank_fee_is_zero(cls, value: Any) -> Any:
        if value is None or value == "":
            return Decimal("0")
        return value

    @field_validator("execution_id", mode="before")
    @classmethod
    def _blank_id_is_missing(cls, value: Any) -> Any:
        if value == "":
            return None
        return value
