"""Common reusable utility exports."""

from .abis import ContractArtifact, load_artifact
from .addresses import ZERO_ADDRESS, is_valid_address, is_zero_address, require_address
from .health import normalize_health
from .sampler import assemble_series, past_block_numbers, resolve_period, sampling_plan

__all__ = [
    "ContractArtifact",
    "load_artifact",
    "ZERO_ADDRESS",
    "is_valid_address",
    "is_zero_address",
    "require_address",
    "normalize_health",
    "assemble_series",
    "past_block_numbers",
    "resolve_period",
    "sampling_plan",
]
