"""Typed payloads exchanged between the chain client and the handlers."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChainModel(BaseModel):
    """Immutable base for chain payloads."""

    model_config = ConfigDict(frozen=True)


class TxResult(ChainModel):
    """Mined transaction receipt summary."""

    transaction_hash: str = Field(..., min_length=3)
    block_number: Optional[int] = Field(default=None, ge=0)
    status: Optional[int] = Field(default=None)
    gas_used: Optional[int] = Field(default=None, ge=0)
    from_address: Optional[str] = Field(default=None)
    contract_address: Optional[str] = Field(default=None)

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class EventRecord(ChainModel):
    """Decoded contract event log entry."""

    event_name: str
    address: str
    transaction_hash: str
    block_number: int = Field(..., ge=0)
    log_index: int = Field(default=0, ge=0)
    args: Dict[str, Any] = Field(default_factory=dict)


class AccountValues(ChainModel):
    """Supplied and borrowed value of an account across all markets."""

    supply_value: int = Field(default=0, ge=0)
    borrow_value: int = Field(default=0, ge=0)

    @property
    def net_balance(self) -> int:
        return self.supply_value - self.borrow_value

    @property
    def has_outstanding_debt(self) -> bool:
        return self.borrow_value > 0


class BalancePoint(ChainModel):
    """Net account balance at a sampled block."""

    timestamp: datetime
    balance: int


class MarketBalancePoint(ChainModel):
    """Market totals at a sampled block."""

    timestamp: datetime
    total_supply: int
    total_borrow: int
