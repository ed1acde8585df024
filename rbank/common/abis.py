"""Contract ABIs used by the rbank handlers.

Compiled artifacts (`Controller.json`, `Market.json`, `FaucetToken.json`)
carry both `abi` and `bytecode`. When an artifacts directory is configured
they are loaded from disk; otherwise the built-in ABIs below are enough for
every call except deployment.
"""

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Dict, Final, List, Optional, Sequence, Tuple, Union


logger = logging.getLogger(__name__)

CONTROLLER: Final[str] = "Controller"
MARKET: Final[str] = "Market"
TOKEN: Final[str] = "FaucetToken"

Param = Tuple[str, str]


def _params(items: Sequence[Param]) -> List[Dict[str, Any]]:
    return [{"internalType": kind, "name": name, "type": kind} for name, kind in items]


def _view(name: str, inputs: Sequence[Param] = (), outputs: Sequence[Param] = ()) -> Dict[str, Any]:
    return {
        "inputs": _params(inputs),
        "name": name,
        "outputs": _params(outputs),
        "stateMutability": "view",
        "type": "function",
    }


def _write(name: str, inputs: Sequence[Param] = (), outputs: Sequence[Param] = ()) -> Dict[str, Any]:
    return {
        "inputs": _params(inputs),
        "name": name,
        "outputs": _params(outputs),
        "stateMutability": "nonpayable",
        "type": "function",
    }


def _event(name: str, inputs: Sequence[Tuple[str, str, bool]]) -> Dict[str, Any]:
    return {
        "anonymous": False,
        "inputs": [
            {"indexed": indexed, "internalType": kind, "name": arg, "type": kind}
            for arg, kind, indexed in inputs
        ],
        "name": name,
        "type": "event",
    }


def _constructor(inputs: Sequence[Param]) -> Dict[str, Any]:
    return {"inputs": _params(inputs), "stateMutability": "nonpayable", "type": "constructor"}


CONTROLLER_ABI: Final[List[Any]] = [
    _constructor([]),
    # --- View Functions ---
    _view("MANTISSA", outputs=[("", "uint256")]),
    _view("owner", outputs=[("", "address")]),
    _view("deployBlock", outputs=[("", "uint256")]),
    _view("collateralFactor", outputs=[("", "uint256")]),
    _view("liquidationFactor", outputs=[("", "uint256")]),
    _view("marketListSize", outputs=[("", "uint256")]),
    _view("marketList", inputs=[("", "uint256")], outputs=[("", "address")]),
    _view("marketsByToken", inputs=[("", "address")], outputs=[("", "address")]),
    _view("prices", inputs=[("", "address")], outputs=[("", "uint256")]),
    _view(
        "getAccountValues",
        inputs=[("account", "address")],
        outputs=[("supplyValue", "uint256"), ("borrowValue", "uint256")],
    ),
    _view("getAccountLiquidity", inputs=[("account", "address")], outputs=[("", "int256")]),
    _view("getAccountHealth", inputs=[("account", "address")], outputs=[("", "int256")]),
    # --- State-changing Functions ---
    _write("setCollateralFactor", inputs=[("factor", "uint256")]),
    _write("setLiquidationFactor", inputs=[("factor", "uint256")]),
    _write("addMarket", inputs=[("market", "address")]),
    _write("setPrice", inputs=[("market", "address"), ("price", "uint256")]),
    # --- Events ---
    _event("MarketAdded", [("market", "address", True), ("marketListSize", "uint256", False)]),
]

MARKET_ABI: Final[List[Any]] = [
    _constructor([("tokenAddress", "address"), ("baseBorrowRate", "uint256")]),
    # --- View Functions ---
    _view("token", outputs=[("", "address")]),
    _view("controller", outputs=[("", "address")]),
    _view("owner", outputs=[("", "address")]),
    _view("deployBlock", outputs=[("", "uint256")]),
    _view("baseBorrowRate", outputs=[("", "uint256")]),
    _view("borrowRatePerBlock", outputs=[("", "uint256")]),
    _view("getCash", outputs=[("", "uint256")]),
    _view("totalSupply", outputs=[("", "uint256")]),
    _view("totalBorrows", outputs=[("", "uint256")]),
    _view("supplyOf", inputs=[("user", "address")], outputs=[("", "uint256")]),
    _view("borrowBy", inputs=[("user", "address")], outputs=[("", "uint256")]),
    # --- State-changing Functions ---
    _write("setController", inputs=[("controller", "address")]),
    _write("supply", inputs=[("amount", "uint256")]),
    _write("borrow", inputs=[("amount", "uint256")]),
    _write("redeem", inputs=[("amount", "uint256")]),
    _write("payBorrow", inputs=[("amount", "uint256")]),
    _write(
        "liquidateBorrow",
        inputs=[("borrower", "address"), ("amount", "uint256"), ("collateralMarket", "address")],
    ),
    # --- Events ---
    _event("Supply", [("user", "address", True), ("amount", "uint256", False)]),
    _event("Borrow", [("user", "address", True), ("amount", "uint256", False)]),
    _event("Redeem", [("user", "address", True), ("amount", "uint256", False)]),
    _event("RepayBorrow", [("user", "address", True), ("amount", "uint256", False)]),
    _event(
        "LiquidateBorrow",
        [
            ("borrower", "address", True),
            ("amount", "uint256", False),
            ("liquidator", "address", True),
            ("collateralMarket", "address", False),
            ("collateralAmount", "uint256", False),
        ],
    ),
]

TOKEN_ABI: Final[List[Any]] = [
    _constructor(
        [
            ("_initialAmount", "uint256"),
            ("_tokenName", "string"),
            ("_decimalUnits", "uint8"),
            ("_tokenSymbol", "string"),
        ]
    ),
    # --- View Functions ---
    _view("name", outputs=[("", "string")]),
    _view("symbol", outputs=[("", "string")]),
    _view("decimals", outputs=[("", "uint8")]),
    _view("totalSupply", outputs=[("", "uint256")]),
    _view("balanceOf", inputs=[("owner", "address")], outputs=[("", "uint256")]),
    _view("allowance", inputs=[("owner", "address"), ("spender", "address")], outputs=[("", "uint256")]),
    # --- State-changing Functions ---
    _write("approve", inputs=[("spender", "address"), ("amount", "uint256")], outputs=[("", "bool")]),
    _write("transfer", inputs=[("dst", "address"), ("amount", "uint256")], outputs=[("", "bool")]),
    _write("allocateTo", inputs=[("owner", "address"), ("value", "uint256")]),
    # --- Events ---
    _event(
        "Transfer",
        [("from", "address", True), ("to", "address", True), ("value", "uint256", False)],
    ),
    _event(
        "Approval",
        [("owner", "address", True), ("spender", "address", True), ("value", "uint256", False)],
    ),
]

_BUILT_IN_ABIS: Final[Dict[str, List[Any]]] = {
    CONTROLLER: CONTROLLER_ABI,
    MARKET: MARKET_ABI,
    TOKEN: TOKEN_ABI,
}


@dataclass(frozen=True)
class ContractArtifact:
    """ABI plus optional creation bytecode for one contract."""

    name: str
    abi: List[Any]
    bytecode: Optional[str] = None


def load_artifact(name: str, artifacts_dir: Optional[Union[str, Path]] = None) -> ContractArtifact:
    """Load `<artifacts_dir>/<name>.json`, falling back to the built-in ABI.

    Raises:
        KeyError: If *name* is not a known contract.
    """
    built_in = _BUILT_IN_ABIS[name]
    if artifacts_dir is None:
        return ContractArtifact(name=name, abi=built_in)

    artifact_path = Path(artifacts_dir) / "{0}.json".format(name)
    try:
        with artifact_path.open("r", encoding="utf-8") as artifact_file:
            payload = json.load(artifact_file)
    except FileNotFoundError:
        logger.warning("Artifact not found at %s. Using built-in ABI for %s.", artifact_path, name)
        return ContractArtifact(name=name, abi=built_in)
    except Exception:
        logger.exception("Failed to load artifact from %s", artifact_path)
        raise

    abi = payload.get("abi") or built_in
    bytecode = payload.get("bytecode") or None
    return ContractArtifact(name=name, abi=abi, bytecode=bytecode)
