"""
ztron Proving Parameters

Spend and output circuit parameters are large files read once per
process. get_parameters() loads them on first use under a lock; later
calls return the cached instance.
"""

from __future__ import annotations
import hashlib
import hmac
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ztron.errors import ProvingParametersError

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_cached: Optional[Tuple[Tuple[str, str], ProvingParameters]] = None


@dataclass(frozen=True)
class ProvingParameters:
    """Raw spend and output circuit parameters."""
    spend: bytes
    output: bytes
    spend_path: str
    output_path: str

    def __repr__(self) -> str:
        return (
            f"ProvingParameters(spend={self.spend_path} [{len(self.spend)} bytes], "
            f"output={self.output_path} [{len(self.output)} bytes])"
        )


def params_digest(data: bytes) -> str:
    """BLAKE2b-512 hex digest used to pin parameter files."""
    return hashlib.blake2b(data, digest_size=64).hexdigest()


def _read(path: str, expected_hash: Optional[str]) -> bytes:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ProvingParametersError(path, str(e)) from e

    if not data:
        raise ProvingParametersError(path, "file is empty")

    if expected_hash:
        actual = params_digest(data)
        if not hmac.compare_digest(actual, expected_hash.lower()):
            raise ProvingParametersError(path, f"digest mismatch: {actual[:16]}...")

    return data


def load_parameters(spend_path: str, output_path: str,
                    spend_hash: Optional[str] = None,
                    output_hash: Optional[str] = None) -> ProvingParameters:
    """
    Read and optionally verify both parameter files.

    Raises:
        ProvingParametersError: If a file is missing, empty or fails its digest
    """
    spend = _read(spend_path, spend_hash)
    output = _read(output_path, output_hash)
    logger.info(f"Loaded proving parameters: spend={len(spend)} bytes, output={len(output)} bytes")
    return ProvingParameters(spend=spend, output=output, spend_path=spend_path, output_path=output_path)


def get_parameters(config) -> ProvingParameters:
    """
    Process-wide parameters for a ProverConfig, loaded on first use.

    A config pointing at different files replaces the cached set.
    """
    global _cached

    key = (config.spend_params_path, config.output_params_path)
    cached = _cached
    if cached is not None and cached[0] == key:
        return cached[1]

    with _lock:
        if _cached is None or _cached[0] != key:
            logger.debug(f"Initializing proving parameters from {key[0]}, {key[1]}")
            params = load_parameters(
                config.spend_params_path,
                config.output_params_path,
                config.spend_params_hash,
                config.output_params_hash,
            )
            _cached = (key, params)
        return _cached[1]


def reset_parameters() -> None:
    """Drop the cached parameters."""
    global _cached
    with _lock:
        _cached = None
