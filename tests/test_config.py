"""
ztron Configuration Tests
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from ztron.config import BuilderConfig, ContractConfig, LogConfig, ProverConfig, setup_logging
from ztron.constants import OUTPUT_PARAMS_FILENAME, SPEND_PARAMS_FILENAME


VALID_ADDRESS = "41" + "22" * 20


@pytest.fixture
def config() -> BuilderConfig:
    return BuilderConfig(contract=ContractConfig(address=VALID_ADDRESS))


class TestValidation:
    """Tests for configuration validation."""

    def test_valid(self, config):
        """Test a configured contract validates."""
        assert config.validate() == []

    def test_defaults_need_contract(self):
        """Test the default config has no contract address."""
        errors = BuilderConfig().validate()
        assert len(errors) == 1
        assert "Contract address" in errors[0]

    @pytest.mark.parametrize("address", ["zz", "42" + "22" * 20, "41" + "22" * 19])
    def test_invalid_address(self, config, address):
        """Test non-hex, wrong prefix and wrong length."""
        config.contract.address = address
        assert config.validate()

    def test_prefixed_address(self, config):
        """Test 0x-prefixed hex is accepted."""
        config.contract.address = "0x" + VALID_ADDRESS
        assert config.validate() == []

    def test_invalid_exponent(self, config):
        """Test the exponent range."""
        config.contract.scaling_exponent = 78
        assert any("scaling exponent" in e for e in config.validate())

    def test_invalid_log_level(self, config):
        """Test unknown log levels."""
        config.log.level = "LOUD"
        assert any("log level" in e for e in config.validate())

    def test_scaling_factor(self):
        """Test factor is 10^exponent."""
        assert ContractConfig(scaling_exponent=6).scaling_factor == 10 ** 6


class TestPersistence:
    """Tests for save, load and environment configuration."""

    def test_save_load(self, config, tmp_path):
        """Test a saved config loads back equal."""
        config.prover = ProverConfig.from_dir("/srv/params", parallel_proofs=True)
        config.log.level = "DEBUG"
        path = str(tmp_path / "ztron.json")

        config.save(path)
        loaded = BuilderConfig.load(path)

        assert loaded.to_dict() == config.to_dict()
        assert loaded.prover.parallel_proofs

    def test_load_partial(self, tmp_path):
        """Test missing sections keep defaults."""
        path = tmp_path / "partial.json"
        path.write_text('{"contract": {"address": "%s"}}' % VALID_ADDRESS)

        loaded = BuilderConfig.load(str(path))
        assert loaded.contract.address == VALID_ADDRESS
        assert loaded.log.level == "INFO"

    def test_from_env(self, monkeypatch):
        """Test environment variables."""
        monkeypatch.setenv("ZTRON_CONTRACT_ADDRESS", VALID_ADDRESS)
        monkeypatch.setenv("ZTRON_SCALING_EXPONENT", "6")
        monkeypatch.setenv("ZTRON_PARAMS_DIR", "/srv/params")
        monkeypatch.setenv("ZTRON_LOG_LEVEL", "WARNING")

        config = BuilderConfig.from_env()

        assert config.contract.address == VALID_ADDRESS
        assert config.contract.scaling_exponent == 6
        assert config.prover.spend_params_path == str(Path("/srv/params") / SPEND_PARAMS_FILENAME)
        assert config.prover.output_params_path == str(Path("/srv/params") / OUTPUT_PARAMS_FILENAME)
        assert config.log.level == "WARNING"
        assert config.validate() == []

    def test_from_env_defaults(self, monkeypatch):
        """Test unset variables keep defaults."""
        for name in ("ZTRON_CONTRACT_ADDRESS", "ZTRON_SCALING_EXPONENT", "ZTRON_PARAMS_DIR", "ZTRON_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        config = BuilderConfig.from_env()
        assert config.contract.scaling_exponent == 18
        assert config.prover == ProverConfig()


class TestLogging:
    """Tests for logging setup."""

    @pytest.fixture
    def restore_root_logger(self):
        root = logging.getLogger()
        level, handlers = root.level, list(root.handlers)
        yield root
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers = handlers
        root.setLevel(level)

    def test_file_handler(self, restore_root_logger, tmp_path):
        """Test level and rotating file output."""
        log_file = tmp_path / "ztron.log"
        setup_logging(LogConfig(level="debug", file=str(log_file), max_size_mb=1, backup_count=2))

        root = restore_root_logger
        assert root.level == logging.DEBUG
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 1024 * 1024
        assert file_handlers[0].backupCount == 2

        logging.getLogger("ztron.test").debug("hello")
        file_handlers[0].flush()
        assert "hello" in log_file.read_text()
