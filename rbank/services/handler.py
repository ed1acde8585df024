"""Shared plumbing for contract handlers."""

import asyncio
import copy
import logging
from typing import Any, List, Optional, Type, TypeVar, Union

from ..common.abis import ContractArtifact, load_artifact
from ..common.addresses import require_address
from ..common.sampler import past_block_numbers
from ..core.chain_client import ChainClient
from ..models.chain import TxResult
from ..models.enums import ErrorKind, Period
from ..models.exceptions import ConfigurationError, InvalidArgumentError
from ..models.results import Err, Ok, Result


logger = logging.getLogger(__name__)

H = TypeVar("H", bound="ContractHandler")


class ContractHandler:
    """Bind one deployed contract to a chain client.

    Reads go through `call_view` at the handler's block (latest unless the
    handler was produced by `at_block`). Writes always target the chain head.
    """

    artifact: ContractArtifact
    address_label = "contract address"

    def __init__(
        self,
        client: ChainClient,
        address: str,
        block_identifier: Optional[int] = None,
        artifact: Optional[ContractArtifact] = None,
    ) -> None:
        self._address = require_address(address, self.address_label)
        self._client = client
        self._block_identifier = block_identifier
        if artifact is None and client.artifacts_dir:
            artifact = load_artifact(self.artifact.name, client.artifacts_dir)
        if artifact is not None:
            self.artifact = artifact

    @classmethod
    def from_address(cls: Type[H], client: ChainClient, address: Any, **kwargs: Any) -> Result:
        """Build a handler, returning `Err` instead of raising on bad input."""
        try:
            return Ok(cls(client, address, **kwargs))
        except InvalidArgumentError as exc:
            logger.warning("Rejected %s address=%r: %s", cls.__name__, address, exc)
            return Err(ErrorKind.INVALID_ARGUMENT, str(exc))

    @classmethod
    async def _deploy(
        cls,
        client: ChainClient,
        *args: Any,
        artifacts_dir: Optional[str] = None,
        from_account: Optional[str] = None,
    ) -> str:
        """Deploy this handler's contract and return the new address.

        *artifacts_dir* defaults to the client's configured directory.
        """
        artifact = load_artifact(cls.artifact.name, artifacts_dir or client.artifacts_dir)
        if not artifact.bytecode:
            raise ConfigurationError(
                "No bytecode for {0}. Configure artifacts_dir with {0}.json.".format(artifact.name)
            )
        address = await client.deploy_contract(artifact.abi, artifact.bytecode, *args, from_account=from_account)
        logger.info("%s deployed address=%s", cls.__name__, address)
        return address

    def __repr__(self) -> str:
        return "{0}(address={1!r}, block={2!r})".format(
            self.__class__.__name__,
            self._address,
            self._block_identifier,
        )

    @property
    def address(self) -> str:
        """Lower-cased on-chain address of this handler."""
        return self._address

    @property
    def client(self) -> ChainClient:
        return self._client

    @property
    def block_identifier(self) -> Optional[int]:
        return self._block_identifier

    def at_block(self: H, block_number: int) -> H:
        """Return a copy of this handler whose reads are pinned to *block_number*."""
        pinned = copy.copy(self)
        pinned._block_identifier = int(block_number)
        return pinned

    def set_default_block(self, block_number: Optional[int]) -> None:
        """Pin (or with None, unpin) reads of this handler in place."""
        self._block_identifier = None if block_number is None else int(block_number)

    async def _call(self, method: str, *args: Any) -> Any:
        return await self._client.call_view(
            self._address,
            self.artifact.abi,
            method,
            *args,
            block_identifier=self._block_identifier,
        )

    async def _call_int(self, method: str, *args: Any) -> int:
        return int(await self._call(method, *args))

    async def _send(self, method: str, *args: Any, from_account: Optional[str] = None) -> TxResult:
        return await self._client.send_transaction(
            self._address,
            self.artifact.abi,
            method,
            *args,
            from_account=from_account,
        )

    async def deploy_block(self) -> int:
        """Block in which this contract was deployed."""
        return await self._call_int("deployBlock")

    async def past_block_numbers(self, period: Optional[Union[Period, str]] = Period.WEEK) -> List[int]:
        """Sampled past block numbers for *period*, never before `deploy_block`."""
        deploy_block, current_block = await asyncio.gather(
            self.deploy_block(),
            self._client.get_block_number(),
        )
        return past_block_numbers(period, deploy_block, current_block)
