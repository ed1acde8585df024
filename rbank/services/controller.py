"""Controller handler: protocol-wide factors, prices and account state."""

import asyncio
from decimal import Decimal
import logging
from typing import List, Optional, Union

from ..common.abis import CONTROLLER, load_artifact
from ..common.addresses import is_zero_address, require_address
from ..common.health import normalize_health
from ..common.sampler import assemble_series
from ..core.chain_client import ChainClient
from ..models.chain import AccountValues, BalancePoint, TxResult
from ..models.enums import Period
from ..models.exceptions import InvalidArgumentError, NotFoundError
from .handler import ContractHandler


logger = logging.getLogger(__name__)


class Controller(ContractHandler):
    """Handler for an on-chain `Controller` deployment."""

    artifact = load_artifact(CONTROLLER)
    address_label = "controller address"

    @classmethod
    async def create(
        cls,
        client: ChainClient,
        artifacts_dir: Optional[str] = None,
        from_account: Optional[str] = None,
    ) -> str:
        """Deploy a new controller and return its lower-cased address."""
        return await cls._deploy(client, artifacts_dir=artifacts_dir, from_account=from_account)

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    async def mantissa(self) -> int:
        """Fixed-point scale used by every factor of this controller."""
        return await self._call_int("MANTISSA")

    async def collateral_factor(self) -> float:
        mantissa, raw = await asyncio.gather(self.mantissa(), self._call_int("collateralFactor"))
        return raw / mantissa

    async def liquidation_factor(self) -> float:
        mantissa, raw = await asyncio.gather(self.mantissa(), self._call_int("liquidationFactor"))
        return raw / mantissa

    async def set_collateral_factor(self, collateral_factor: float, from_account: Optional[str] = None) -> TxResult:
        scaled = await self._scale(collateral_factor, "collateral factor")
        logger.info("Setting collateral factor=%s scaled=%s controller=%s", collateral_factor, scaled, self.address)
        return await self._send("setCollateralFactor", scaled, from_account=from_account)

    async def set_liquidation_factor(self, liquidation_factor: float, from_account: Optional[str] = None) -> TxResult:
        scaled = await self._scale(liquidation_factor, "liquidation factor")
        logger.info("Setting liquidation factor=%s scaled=%s controller=%s", liquidation_factor, scaled, self.address)
        return await self._send("setLiquidationFactor", scaled, from_account=from_account)

    async def _scale(self, factor: float, label: str) -> int:
        """Convert a real-valued factor into its mantissa-scaled integer."""
        try:
            value = Decimal(str(factor))
        except ArithmeticError as exc:
            raise InvalidArgumentError("Invalid {0}: {1!r}".format(label, factor)) from exc
        if value < 0:
            raise InvalidArgumentError("{0} must be >= 0".format(label.capitalize()))
        mantissa = await self.mantissa()
        return int(value * mantissa)

    # ------------------------------------------------------------------
    # Ownership and registry
    # ------------------------------------------------------------------

    async def owner(self) -> str:
        return str(await self._call("owner")).lower()

    async def is_owner(self, account: Optional[str] = None) -> bool:
        """Whether *account* (default: first node account) owns this controller."""
        if account:
            candidate = require_address(account, "account")
            owner = await self.owner()
        else:
            owner, accounts = await asyncio.gather(self.owner(), self._client.get_accounts())
            if not accounts:
                return False
            candidate = accounts[0].lower()
        return candidate == owner

    async def market_list_size(self) -> int:
        return await self._call_int("marketListSize")

    async def market_address(self, market_index: int) -> str:
        """Address of the market registered at *market_index*."""
        return str(await self._call("marketList", int(market_index))).lower()

    async def market_addresses(self) -> List[str]:
        """Addresses of all registered markets, in registration order."""
        size = await self.market_list_size()
        addresses = await asyncio.gather(*(self.market_address(index) for index in range(size)))
        return list(addresses)

    async def market_address_by_token(self, token_address: str) -> str:
        """Address of the market trading *token_address*.

        Raises:
            NotFoundError: If no market is registered for the token.
        """
        token_address = require_address(token_address, "token address")
        market_address = str(await self._call("marketsByToken", token_address))
        if is_zero_address(market_address):
            raise NotFoundError("Token address not registered: {0}".format(token_address))
        return market_address.lower()

    async def add_market(self, market_address: str, from_account: Optional[str] = None) -> TxResult:
        """Register an existing market. Reverts on-chain if already added."""
        market_address = require_address(market_address, "market address")
        logger.info("Adding market=%s controller=%s", market_address, self.address)
        return await self._send("addMarket", market_address, from_account=from_account)

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    async def market_price(self, market_address: str) -> int:
        return await self._call_int("prices", require_address(market_address, "market address"))

    async def set_market_price(
        self,
        market_address: str,
        market_price: int,
        from_account: Optional[str] = None,
    ) -> TxResult:
        market_address = require_address(market_address, "market address")
        logger.info("Setting price=%s market=%s controller=%s", market_price, market_address, self.address)
        return await self._send("setPrice", market_address, int(market_price), from_account=from_account)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def account_values(self, account: str) -> AccountValues:
        """Supplied and borrowed value of *account* across all markets."""
        supply_value, borrow_value = await self._call(
            "getAccountValues",
            require_address(account, "account"),
        )
        return AccountValues(supply_value=int(supply_value), borrow_value=int(borrow_value))

    async def account_liquidity(self, account: str) -> int:
        return await self._call_int("getAccountLiquidity", require_address(account, "account"))

    async def account_health(self, account: str) -> float:
        """Account health as a score in [0, 1]; 1 when nothing is borrowed."""
        mantissa, values = await asyncio.gather(self.mantissa(), self.account_values(account))
        if not values.has_outstanding_debt:
            return normalize_health(0, mantissa, has_outstanding_debt=False)
        raw_health = await self._call_int("getAccountHealth", require_address(account, "account"))
        return normalize_health(raw_health, mantissa, has_outstanding_debt=True)

    async def overall_balance(
        self,
        account: str,
        period: Optional[Union[Period, str]] = Period.WEEK,
    ) -> List[BalancePoint]:
        """Net balance (supply - borrow) of *account* over *period*.

        Element ``i`` corresponds to ``past_block_numbers(period)[i]``.
        """
        account = require_address(account, "account")
        block_numbers = await self.past_block_numbers(period)

        async def _net_balance(block_number: int) -> int:
            values = await self.at_block(block_number).account_values(account)
            return values.net_balance

        series = await assemble_series(block_numbers, _net_balance, self._client.get_block_timestamp)
        return [BalancePoint(timestamp=timestamp, balance=balance) for timestamp, balance in series]
