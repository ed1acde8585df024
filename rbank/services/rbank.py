"""Rbank facade: one controller and the markets registered in it."""

import logging
from typing import Any, List, Optional, Union

from ..common.addresses import require_address
from ..core.chain_client import ChainClient
from ..core.config import RbankSettings
from ..core.logging_config import setup_logging
from ..models.exceptions import InvalidArgumentError, NotFoundError
from .controller import Controller
from .market import Market
from .token import Token


logger = logging.getLogger(__name__)


class Rbank:
    """Entry point exposing controller and market handlers over one client."""

    Controller = Controller
    Market = Market
    Token = Token

    def __init__(self, client: ChainClient, controller_address: Optional[str] = None) -> None:
        self._client = client
        self._controller: Optional[Controller] = None
        if controller_address:
            self.connect_controller(controller_address)

    @classmethod
    def from_settings(cls, settings: RbankSettings) -> "Rbank":
        """Build a client and facade from settings; call `close` on teardown."""
        setup_logging(settings.log_level)
        return cls(ChainClient.from_settings(settings), controller_address=settings.controller_address)

    async def __aenter__(self) -> "Rbank":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()

    @property
    def client(self) -> ChainClient:
        return self._client

    @property
    def controller(self) -> Optional[Controller]:
        """Connected controller, or None before `connect_controller`."""
        return self._controller

    @controller.setter
    def controller(self, controller_address: str) -> None:
        self.connect_controller(controller_address)

    def connect_controller(self, controller_address: str) -> Controller:
        """Bind the facade to an on-chain controller deployment."""
        self._controller = Controller(self._client, controller_address)
        logger.info("Rbank connected to controller=%s", self._controller.address)
        return self._controller

    def _require_controller(self) -> Controller:
        if self._controller is None:
            raise NotFoundError("No controller connected. Call connect_controller first.")
        return self._controller

    async def markets(self) -> List[Market]:
        """Handlers for every market registered in the controller."""
        addresses = await self._require_controller().market_addresses()
        return [Market(self._client, address) for address in addresses]

    async def market(self, market_id: Union[int, str]) -> Market:
        """Market by registry index or by address.

        Raises:
            NotFoundError: If no registered market matches *market_id*.
        """
        markets = await self.markets()
        if isinstance(market_id, str):
            address = require_address(market_id, "market address")
            for market in markets:
                if market.address == address:
                    return market
            raise NotFoundError("There is no market with that address: {0}".format(market_id))

        if 0 <= market_id < len(markets):
            return markets[market_id]
        raise NotFoundError("There is no market at this index: {0}".format(market_id))

    async def market_exists_by_token(self, token_address: str) -> bool:
        """Whether a market is registered for *token_address*.

        A malformed token address has no market, so it yields False.
        """
        controller = self._require_controller()
        try:
            await controller.market_address_by_token(token_address)
            return True
        except (InvalidArgumentError, NotFoundError):
            return False
