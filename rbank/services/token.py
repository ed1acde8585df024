"""ERC20 faucet token handler."""

import logging
from typing import Optional

from ..common.abis import TOKEN, load_artifact
from ..common.addresses import require_address
from ..models.chain import TxResult
from .handler import ContractHandler


logger = logging.getLogger(__name__)


class Token(ContractHandler):
    """Token handler used by markets to approve transfers."""

    artifact = load_artifact(TOKEN)
    address_label = "token address"

    async def name(self) -> str:
        return str(await self._call("name"))

    async def symbol(self) -> str:
        return str(await self._call("symbol"))

    async def decimals(self) -> int:
        return await self._call_int("decimals")

    async def total_supply(self) -> int:
        return await self._call_int("totalSupply")

    async def balance_of(self, account: str) -> int:
        return await self._call_int("balanceOf", require_address(account, "account"))

    async def allowance(self, owner: str, spender: str) -> int:
        return await self._call_int(
            "allowance",
            require_address(owner, "owner"),
            require_address(spender, "spender"),
        )

    async def approve(self, spender: str, amount: int, from_account: Optional[str] = None) -> TxResult:
        """Authorize *spender* to transfer *amount* on behalf of the sender."""
        spender = require_address(spender, "spender")
        logger.info("Approving spender=%s amount=%s token=%s", spender, amount, self.address)
        return await self._send("approve", spender, int(amount), from_account=from_account)
