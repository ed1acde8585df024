"""Market handler: supply, borrow and market-level history."""

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple, Union

from ..common.abis import MARKET, load_artifact
from ..common.addresses import is_valid_address, require_address
from ..common.sampler import assemble_series
from ..core.chain_client import ChainClient
from ..models.chain import EventRecord, MarketBalancePoint, TxResult
from ..models.enums import Period
from ..models.exceptions import InvalidArgumentError
from .handler import ContractHandler
from .token import Token


logger = logging.getLogger(__name__)

MARKET_EVENTS = ("Supply", "Borrow", "Redeem", "RepayBorrow", "LiquidateBorrow")


class Market(ContractHandler):
    """Handler for an on-chain `Market` deployment."""

    artifact = load_artifact(MARKET)
    address_label = "market address"

    def __init__(self, client: ChainClient, address: str, **kwargs: Any) -> None:
        super().__init__(client, address, **kwargs)
        self._token: Optional[Token] = None

    @classmethod
    async def create(
        cls,
        client: ChainClient,
        token_address: Any,
        base_borrow_rate: Optional[int],
        artifacts_dir: Optional[str] = None,
        from_account: Optional[str] = None,
    ) -> str:
        """Deploy a market for an ERC20 token and return its address.

        Raises:
            InvalidArgumentError: If the token address is malformed or the
                base borrow rate is missing.
        """
        if not is_valid_address(token_address) or base_borrow_rate is None:
            raise InvalidArgumentError("Either the token address or the base borrow rate are missing")
        return await cls._deploy(
            client,
            require_address(token_address, "token address"),
            int(base_borrow_rate),
            artifacts_dir=artifacts_dir,
            from_account=from_account,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def token_address(self) -> str:
        return str(await self._call("token")).lower()

    async def token(self) -> Token:
        """Token traded by this market; resolved once per handler."""
        if self._token is None:
            self._token = Token(self._client, await self.token_address())
        return self._token

    async def controller_address(self) -> str:
        return str(await self._call("controller")).lower()

    async def base_borrow_rate(self) -> int:
        return await self._call_int("baseBorrowRate")

    async def borrow_rate_per_block(self) -> int:
        return await self._call_int("borrowRatePerBlock")

    async def balance(self) -> int:
        """Cash held by this market in its token units."""
        return await self._call_int("getCash")

    async def total_supply(self) -> int:
        return await self._call_int("totalSupply")

    async def total_borrows(self) -> int:
        return await self._call_int("totalBorrows")

    async def supply_of(self, account: Optional[str] = None) -> int:
        """Amount supplied by *account* (default: the sending account)."""
        return await self._call_int("supplyOf", await self._account_or_sender(account))

    async def borrow_by(self, account: Optional[str] = None) -> int:
        return await self._call_int("borrowBy", await self._account_or_sender(account))

    async def totals(self) -> Tuple[int, int]:
        """`(total_supply, total_borrows)` at this handler's block."""
        total_supply, total_borrows = await asyncio.gather(self.total_supply(), self.total_borrows())
        return total_supply, total_borrows

    async def overall_balance(self, period: Optional[Union[Period, str]] = Period.WEEK) -> List[MarketBalancePoint]:
        """Total supply and total borrows of this market over *period*."""
        block_numbers = await self.past_block_numbers(period)

        async def _totals(block_number: int) -> Tuple[int, int]:
            return await self.at_block(block_number).totals()

        series = await assemble_series(block_numbers, _totals, self._client.get_block_timestamp)
        return [
            MarketBalancePoint(timestamp=timestamp, total_supply=supply, total_borrow=borrow)
            for timestamp, (supply, borrow) in series
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def set_controller_address(self, controller_address: str, from_account: Optional[str] = None) -> TxResult:
        controller_address = require_address(controller_address, "controller address")
        logger.info("Setting controller=%s market=%s", controller_address, self.address)
        return await self._send("setController", controller_address, from_account=from_account)

    async def supply(self, amount: int, from_account: Optional[str] = None) -> TxResult:
        """Approve the market on the token, then supply *amount* into it."""
        logger.info("Supplying amount=%s market=%s", amount, self.address)
        token = await self.token()
        await token.approve(self.address, amount, from_account=from_account)
        return await self._send("supply", int(amount), from_account=from_account)

    async def borrow(self, amount: int, from_account: Optional[str] = None) -> TxResult:
        """Borrow *amount*. Reverts on-chain without collateral in another market."""
        logger.info("Borrowing amount=%s market=%s", amount, self.address)
        return await self._send("borrow", int(amount), from_account=from_account)

    async def redeem(self, amount: int, from_account: Optional[str] = None) -> TxResult:
        logger.info("Redeeming amount=%s market=%s", amount, self.address)
        return await self._send("redeem", int(amount), from_account=from_account)

    async def pay_borrow(self, amount: int, from_account: Optional[str] = None) -> TxResult:
        """Approve the market on the token, then repay *amount* of debt."""
        logger.info("Repaying amount=%s market=%s", amount, self.address)
        token = await self.token()
        await token.approve(self.address, amount, from_account=from_account)
        return await self._send("payBorrow", int(amount), from_account=from_account)

    async def liquidate_borrow(
        self,
        borrower: str,
        amount: int,
        collateral_market: str,
        from_account: Optional[str] = None,
    ) -> TxResult:
        """Repay *amount* of *borrower*'s debt and seize collateral from *collateral_market*."""
        borrower = require_address(borrower, "borrower")
        collateral_market = require_address(collateral_market, "collateral market")
        logger.info(
            "Liquidating borrower=%s amount=%s market=%s collateral=%s",
            borrower,
            amount,
            self.address,
            collateral_market,
        )
        token = await self.token()
        await token.approve(self.address, amount, from_account=from_account)
        return await self._send(
            "liquidateBorrow",
            borrower,
            int(amount),
            collateral_market,
            from_account=from_account,
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def events(
        self,
        event_name: str,
        argument_filters: Optional[Dict[str, Any]] = None,
        from_block: Optional[int] = None,
    ) -> List[EventRecord]:
        """Past `event_name` logs since *from_block* (default: deploy block)."""
        self._require_event(event_name)
        start = from_block if from_block is not None else await self.deploy_block()
        return await self._client.get_events(
            self.address,
            self.artifact.abi,
            event_name,
            argument_filters=argument_filters,
            from_block=start,
        )

    def subscribe(
        self,
        event_name: str,
        argument_filters: Optional[Dict[str, Any]] = None,
        from_block: Optional[int] = None,
    ) -> AsyncIterator[EventRecord]:
        """Stream `event_name` logs as they are mined."""
        self._require_event(event_name)
        return self._client.subscribe_events(
            self.address,
            self.artifact.abi,
            event_name,
            argument_filters=argument_filters,
            from_block=from_block,
        )

    def _require_event(self, event_name: str) -> None:
        if event_name not in MARKET_EVENTS:
            raise InvalidArgumentError(
                "Unknown market event {0!r}. Use one of: {1}".format(event_name, ", ".join(MARKET_EVENTS))
            )

    async def _account_or_sender(self, account: Optional[str]) -> str:
        if account:
            return require_address(account, "account")
        return (await self._client.resolve_sender()).lower()
