"""Async Web3 chain client shared by every rbank handler."""

import asyncio
from decimal import Decimal
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Union

from web3 import AsyncWeb3

from ..common.addresses import is_valid_address, require_address
from ..models.chain import EventRecord, TxResult
from ..models.exceptions import ConfigurationError
from .config import RbankSettings


logger = logging.getLogger(__name__)

BlockIdentifier = Union[int, str]
DEFAULT_RECEIPT_TIMEOUT_SEC = 120


class ChainClient:
    """Read, write and event access to one EVM JSON-RPC endpoint.

    One instance is created at startup, passed to every handler and closed
    on teardown. Remote failures are logged and re-raised unchanged.
    """

    def __init__(
        self,
        rpc_url: str,
        request_timeout_sec: int = 10,
        default_account: Optional[str] = None,
        event_poll_interval_sec: float = 2.0,
        receipt_timeout_sec: int = DEFAULT_RECEIPT_TIMEOUT_SEC,
        artifacts_dir: Optional[str] = None,
        web3: Optional[AsyncWeb3] = None,
    ) -> None:
        """Initialize the async provider.

        Args:
            rpc_url: HTTP JSON-RPC endpoint.
            request_timeout_sec: Per-request HTTP timeout.
            default_account: Sender used when a call does not name one.
            event_poll_interval_sec: Delay between polls in `subscribe_events`.
            receipt_timeout_sec: How long to wait for a transaction to be mined.
            artifacts_dir: Directory of compiled `<Contract>.json` artifacts.
            web3: Pre-built client, mainly for tests.
        """
        try:
            self._rpc_url = rpc_url
            self._default_account = require_address(default_account, "default account") if default_account else None
            self._event_poll_interval_sec = float(event_poll_interval_sec)
            self._receipt_timeout_sec = int(receipt_timeout_sec)
            self._artifacts_dir = artifacts_dir
            if web3 is None:
                web3 = AsyncWeb3(
                    AsyncWeb3.AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout_sec})
                )
            self._w3 = web3
            logger.info("ChainClient initialized rpc_url=%s", rpc_url)
        except Exception:
            logger.exception("Failed to initialize ChainClient rpc_url=%s", rpc_url)
            raise

    @classmethod
    def from_settings(cls, settings: RbankSettings) -> "ChainClient":
        """Build a client from loaded SDK settings."""
        return cls(
            rpc_url=settings.rpc_url,
            request_timeout_sec=settings.request_timeout_sec,
            default_account=settings.default_account,
            event_poll_interval_sec=settings.event_poll_interval_sec,
            artifacts_dir=settings.artifacts_dir,
        )

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    @property
    def web3(self) -> AsyncWeb3:
        return self._w3

    @property
    def artifacts_dir(self) -> Optional[str]:
        return self._artifacts_dir

    async def __aenter__(self) -> "ChainClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def is_connected(self) -> bool:
        """Return provider connectivity status."""
        try:
            return bool(await self._w3.is_connected())
        except Exception:
            logger.exception("Failed to check provider connectivity rpc_url=%s", self._rpc_url)
            raise

    async def close(self) -> None:
        """Release the provider's HTTP session."""
        disconnect = getattr(self._w3.provider, "disconnect", None)
        if disconnect is None:
            return
        try:
            await disconnect()
            logger.info("ChainClient closed rpc_url=%s", self._rpc_url)
        except Exception:
            logger.exception("Failed to close provider rpc_url=%s", self._rpc_url)
            raise

    # ------------------------------------------------------------------
    # Blocks and accounts
    # ------------------------------------------------------------------

    async def get_block_number(self) -> int:
        try:
            return int(await self._w3.eth.block_number)
        except Exception:
            logger.exception("Failed reading current block number.")
            raise

    async def get_block(self, block_identifier: BlockIdentifier) -> Dict[str, Any]:
        """Return the block as a plain mapping (includes `timestamp`)."""
        try:
            block = await self._w3.eth.get_block(block_identifier)
            return dict(block)
        except Exception:
            logger.exception("Failed reading block block_identifier=%s", block_identifier)
            raise

    async def get_block_timestamp(self, block_identifier: BlockIdentifier) -> int:
        block = await self.get_block(block_identifier)
        return int(block["timestamp"])

    async def get_accounts(self) -> List[str]:
        """Return node-managed accounts, lower-cased."""
        try:
            accounts = await self._w3.eth.accounts
            return [str(account).lower() for account in accounts]
        except Exception:
            logger.exception("Failed reading node accounts.")
            raise

    # ------------------------------------------------------------------
    # Contract calls
    # ------------------------------------------------------------------

    async def call_view(
        self,
        address: str,
        abi: List[Any],
        method: str,
        *args: Any,
        block_identifier: Optional[BlockIdentifier] = None,
    ) -> Any:
        """Call a read-only contract function, optionally at a past block."""
        try:
            function = self._function(address, abi, method, args)
            if block_identifier is None:
                return await function.call()
            return await function.call(block_identifier=block_identifier)
        except Exception:
            logger.exception(
                "Failed contract call address=%s method=%s block=%s",
                address,
                method,
                block_identifier,
            )
            raise

    async def send_transaction(
        self,
        address: str,
        abi: List[Any],
        method: str,
        *args: Any,
        from_account: Optional[str] = None,
    ) -> TxResult:
        """Estimate gas, send the transaction and wait for its receipt."""
        try:
            sender = await self.resolve_sender(from_account)
            function = self._function(address, abi, method, args)
            gas = await function.estimate_gas({"from": sender})
            tx_hash = await function.transact({"from": sender, "gas": gas})
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._receipt_timeout_sec,
            )
            result = self._tx_result(receipt)
            logger.info(
                "Transaction mined address=%s method=%s tx_hash=%s status=%s",
                address,
                method,
                result.transaction_hash,
                result.status,
            )
            return result
        except Exception:
            logger.exception("Failed transaction address=%s method=%s", address, method)
            raise

    async def deploy_contract(
        self,
        abi: List[Any],
        bytecode: str,
        *args: Any,
        from_account: Optional[str] = None,
    ) -> str:
        """Deploy a contract and return its lower-cased address."""
        try:
            sender = await self.resolve_sender(from_account)
            factory = self._w3.eth.contract(abi=abi, bytecode=bytecode)
            constructor = factory.constructor(*self._prepare_args(args))
            gas = await constructor.estimate_gas({"from": sender})
            tx_hash = await constructor.transact({"from": sender, "gas": gas})
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._receipt_timeout_sec,
            )
            deployed = str(receipt["contractAddress"]).lower()
            logger.info("Contract deployed address=%s", deployed)
            return deployed
        except Exception:
            logger.exception("Failed contract deployment args=%s", args)
            raise

    async def resolve_sender(self, from_account: Optional[str] = None) -> str:
        """Return the explicit sender, the default account or the first node account."""
        if from_account:
            return self._checksum(require_address(from_account, "sender account"))
        if self._default_account:
            return self._checksum(self._default_account)
        accounts = await self.get_accounts()
        if not accounts:
            raise ConfigurationError("No sender available: node exposes no accounts.")
        return self._checksum(accounts[0])

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def get_events(
        self,
        address: str,
        abi: List[Any],
        event_name: str,
        argument_filters: Optional[Dict[str, Any]] = None,
        from_block: BlockIdentifier = 0,
        to_block: BlockIdentifier = "latest",
    ) -> List[EventRecord]:
        """Read decoded event logs in `[from_block, to_block]`, oldest first."""
        filters = self._prepare_filters(argument_filters)
        try:
            contract = self._contract(address, abi)
            event_callable = getattr(contract.events, event_name)()
            try:
                entries = await event_callable.get_logs(
                    from_block=from_block,
                    to_block=to_block,
                    argument_filters=filters,
                )
            except TypeError:
                entries = await event_callable.get_logs(
                    fromBlock=from_block,
                    toBlock=to_block,
                    argument_filters=filters,
                )
            records = [self._event_record(entry, event_name) for entry in entries]
            records.sort(key=lambda record: (record.block_number, record.log_index))
            return records
        except Exception:
            logger.exception(
                "Failed reading event logs address=%s event=%s from_block=%s to_block=%s filters=%s",
                address,
                event_name,
                from_block,
                to_block,
                filters,
            )
            raise

    async def subscribe_events(
        self,
        address: str,
        abi: List[Any],
        event_name: str,
        argument_filters: Optional[Dict[str, Any]] = None,
        from_block: Optional[int] = None,
    ) -> AsyncIterator[EventRecord]:
        """Yield matching events as new blocks arrive.

        Starts at *from_block* (or the next block when omitted) and polls
        until the consumer stops iterating.
        """
        next_block = from_block if from_block is not None else await self.get_block_number() + 1
        logger.info("Event subscription started address=%s event=%s from_block=%s", address, event_name, next_block)
        while True:
            latest = await self.get_block_number()
            if latest >= next_block:
                records = await self.get_events(
                    address,
                    abi,
                    event_name,
                    argument_filters=argument_filters,
                    from_block=next_block,
                    to_block=latest,
                )
                for record in records:
                    yield record
                next_block = latest + 1
            await asyncio.sleep(self._event_poll_interval_sec)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _contract(self, address: str, abi: List[Any]) -> Any:
        return self._w3.eth.contract(address=self._checksum(require_address(address, "contract address")), abi=abi)

    def _function(self, address: str, abi: List[Any], method: str, args: Sequence[Any]) -> Any:
        contract = self._contract(address, abi)
        return getattr(contract.functions, method)(*self._prepare_args(args))

    def _checksum(self, address: str) -> str:
        return AsyncWeb3.to_checksum_address(address)

    def _prepare_args(self, args: Sequence[Any]) -> List[Any]:
        """Checksum address arguments; web3 rejects lower-case addresses."""
        return [self._checksum(arg) if is_valid_address(arg) else arg for arg in args]

    def _prepare_filters(self, filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return {key: self._checksum(value) if is_valid_address(value) else value for key, value in (filters or {}).items()}

    def _tx_result(self, receipt: Any) -> TxResult:
        contract_address = receipt.get("contractAddress")
        sender = receipt.get("from")
        return TxResult(
            transaction_hash=self._hex_or_str(receipt.get("transactionHash")),
            block_number=receipt.get("blockNumber"),
            status=receipt.get("status"),
            gas_used=receipt.get("gasUsed"),
            from_address=str(sender).lower() if sender else None,
            contract_address=str(contract_address).lower() if contract_address else None,
        )

    def _event_record(self, entry: Any, event_name: str) -> EventRecord:
        return EventRecord(
            event_name=str(entry.get("event") or event_name),
            address=str(entry.get("address") or "").lower(),
            transaction_hash=self._hex_or_str(entry.get("transactionHash")),
            block_number=int(entry.get("blockNumber") or 0),
            log_index=int(entry.get("logIndex") or 0),
            args=self._normalize_payload(dict(entry.get("args") or {})),
        )

    def _hex_or_str(self, value: Any) -> str:
        """Return 0x-prefixed hex string for hash-like values."""
        if value is None:
            return ""
        if isinstance(value, (bytes, bytearray)):
            return AsyncWeb3.to_hex(value)
        return str(value)

    def _normalize_payload(self, payload: Any) -> Any:
        """Recursively normalize decoded values into plain Python types."""
        if isinstance(payload, dict):
            return {str(key): self._normalize_payload(value) for key, value in payload.items()}
        if isinstance(payload, (list, tuple)):
            return [self._normalize_payload(item) for item in payload]
        if isinstance(payload, (bytes, bytearray)):
            return AsyncWeb3.to_hex(payload)
        if isinstance(payload, Decimal):
            return format(payload, "f")
        if is_valid_address(payload):
            return payload.lower()
        return payload
