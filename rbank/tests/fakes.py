"""In-memory chain client double for handler tests."""

from typing import Any, Callable, Dict, List, Optional, Tuple

from rbank.models.chain import EventRecord, TxResult


ViewKey = Tuple[str, str, Tuple[Any, ...]]


class FakeChainClient:
    """Serve view calls from a table and record every transaction.

    A view value may be a callable taking the block identifier, which lets
    tests model state that changes over blocks.
    """

    def __init__(
        self,
        block_number: int = 0,
        accounts: Optional[List[str]] = None,
        block_time_sec: int = 15,
        genesis_timestamp: int = 1_600_000_000,
        artifacts_dir: Optional[str] = None,
    ) -> None:
        self.block_number = block_number
        self.accounts = [account.lower() for account in (accounts or [])]
        self.block_time_sec = block_time_sec
        self.genesis_timestamp = genesis_timestamp
        self.artifacts_dir = artifacts_dir
        self.views: Dict[ViewKey, Any] = {}
        self.view_calls: List[Tuple[str, str, Tuple[Any, ...], Any]] = []
        self.sent: List[Tuple[str, str, Tuple[Any, ...], Optional[str]]] = []
        self.deployed: List[Tuple[str, Tuple[Any, ...]]] = []
        self.events: List[EventRecord] = []
        self.failing_blocks: set = set()
        self.closed = False

    def set_view(self, address: str, method: str, value: Any, *args: Any) -> None:
        self.views[(address.lower(), method, tuple(args))] = value

    def timestamp_of(self, block_number: int) -> int:
        return self.genesis_timestamp + block_number * self.block_time_sec

    async def call_view(
        self,
        address: str,
        abi: List[Any],
        method: str,
        *args: Any,
        block_identifier: Optional[Any] = None,
    ) -> Any:
        key = (address.lower(), method, tuple(args))
        self.view_calls.append((address.lower(), method, tuple(args), block_identifier))
        if key not in self.views:
            raise KeyError("No fake view for {0}".format(key))
        value = self.views[key]
        if callable(value):
            return value(block_identifier)
        return value

    async def send_transaction(
        self,
        address: str,
        abi: List[Any],
        method: str,
        *args: Any,
        from_account: Optional[str] = None,
    ) -> TxResult:
        self.sent.append((address.lower(), method, tuple(args), from_account))
        return TxResult(
            transaction_hash="0x" + "{0:064x}".format(len(self.sent)),
            block_number=self.block_number,
            status=1,
            gas_used=21000,
        )

    async def deploy_contract(self, abi: List[Any], bytecode: str, *args: Any, from_account: Optional[str] = None) -> str:
        self.deployed.append((bytecode, tuple(args)))
        return "0x" + "{0:040x}".format(len(self.deployed))

    async def get_block_number(self) -> int:
        return self.block_number

    async def get_block(self, block_identifier: Any) -> Dict[str, Any]:
        if block_identifier in self.failing_blocks:
            raise ConnectionError("block {0} unavailable".format(block_identifier))
        return {"number": block_identifier, "timestamp": self.timestamp_of(int(block_identifier))}

    async def get_block_timestamp(self, block_identifier: Any) -> int:
        block = await self.get_block(block_identifier)
        return int(block["timestamp"])

    async def get_accounts(self) -> List[str]:
        return list(self.accounts)

    async def resolve_sender(self, from_account: Optional[str] = None) -> str:
        if from_account:
            return from_account
        return self.accounts[0]

    async def get_events(
        self,
        address: str,
        abi: List[Any],
        event_name: str,
        argument_filters: Optional[Dict[str, Any]] = None,
        from_block: Any = 0,
        to_block: Any = "latest",
    ) -> List[EventRecord]:
        return [
            record
            for record in self.events
            if record.event_name == event_name and record.block_number >= int(from_block)
        ]

    async def close(self) -> None:
        self.closed = True


def by_block(values: Dict[int, Any], default: Any = None) -> Callable[[Any], Any]:
    """View value resolved from a block -> value mapping (None means latest)."""

    def _resolve(block_identifier: Any) -> Any:
        if block_identifier is None:
            return default
        return values.get(int(block_identifier), default)

    return _resolve
