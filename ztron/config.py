"""
ztron Builder Configuration
"""

from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional

from ztron.constants import (
    DEFAULT_PARAMS_DIR,
    DEFAULT_SCALING_EXPONENT,
    MAX_SCALING_EXPONENT,
    OUTPUT_PARAMS_FILENAME,
    SPEND_PARAMS_FILENAME,
    TRON_ADDRESS_PREFIX,
    TRON_ADDRESS_SIZE,
)

logger = logging.getLogger(__name__)


@dataclass
class ContractConfig:
    """Shielded TRC-20 contract the payloads are built for."""
    address: str = ""                    # 21-byte hex, 0x41 prefix
    scaling_exponent: int = DEFAULT_SCALING_EXPONENT

    @property
    def scaling_factor(self) -> int:
        return 10 ** self.scaling_exponent


@dataclass
class ProverConfig:
    """Proving parameter files."""
    spend_params_path: str = str(Path(DEFAULT_PARAMS_DIR) / SPEND_PARAMS_FILENAME)
    output_params_path: str = str(Path(DEFAULT_PARAMS_DIR) / OUTPUT_PARAMS_FILENAME)
    spend_params_hash: Optional[str] = None      # BLAKE2b-512 hex
    output_params_hash: Optional[str] = None
    parallel_proofs: bool = False

    @classmethod
    def from_dir(cls, params_dir: str, **kwargs) -> ProverConfig:
        return cls(
            spend_params_path=str(Path(params_dir) / SPEND_PARAMS_FILENAME),
            output_params_path=str(Path(params_dir) / OUTPUT_PARAMS_FILENAME),
            **kwargs,
        )


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


@dataclass
class BuilderConfig:
    """
    Complete builder configuration.
    """
    contract: ContractConfig = field(default_factory=ContractConfig)
    prover: ProverConfig = field(default_factory=ProverConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        # Contract validation
        try:
            address = bytes.fromhex(self.contract.address.removeprefix("0x"))
        except ValueError:
            errors.append(f"Contract address is not hex: {self.contract.address!r}")
        else:
            if len(address) != TRON_ADDRESS_SIZE or address[0] != TRON_ADDRESS_PREFIX:
                errors.append(
                    f"Contract address must be {TRON_ADDRESS_SIZE} bytes starting with {TRON_ADDRESS_PREFIX:#04x}"
                )

        if not 0 <= self.contract.scaling_exponent <= MAX_SCALING_EXPONENT:
            errors.append(f"Invalid scaling exponent: {self.contract.scaling_exponent}")

        # Prover validation
        if not self.prover.spend_params_path or not self.prover.output_params_path:
            errors.append("Proving parameter paths cannot be empty")

        # Log validation
        if not isinstance(getattr(logging, self.log.level.upper(), None), int):
            errors.append(f"Invalid log level: {self.log.level}")

        return errors

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> BuilderConfig:
        """Load configuration from file."""
        with open(path, 'r') as f:
            data = json.load(f)

        config = cls()

        if "contract" in data:
            config.contract = ContractConfig(**data["contract"])

        if "prover" in data:
            config.prover = ProverConfig(**data["prover"])

        if "log" in data:
            config.log = LogConfig(**data["log"])

        logger.info(f"Configuration loaded from {path}")
        return config

    @classmethod
    def from_env(cls) -> BuilderConfig:
        """
        Configuration from environment variables:
        ZTRON_CONTRACT_ADDRESS, ZTRON_SCALING_EXPONENT, ZTRON_PARAMS_DIR, ZTRON_LOG_LEVEL.
        """
        config = cls()
        config.contract.address = os.environ.get("ZTRON_CONTRACT_ADDRESS", "")

        exponent = os.environ.get("ZTRON_SCALING_EXPONENT")
        if exponent is not None:
            config.contract.scaling_exponent = int(exponent)

        params_dir = os.environ.get("ZTRON_PARAMS_DIR")
        if params_dir:
            config.prover = ProverConfig.from_dir(params_dir)

        config.log.level = os.environ.get("ZTRON_LOG_LEVEL", config.log.level)
        return config

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "contract": asdict(self.contract),
            "prover": asdict(self.prover),
            "log": asdict(self.log),
        }


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
        force=True,
    )
