"""Configuration loading and validation."""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, Tuple
from dataclasses import dataclass, field, fields

from audiobatch.domain.exceptions import ConfigurationError
from audiobatch.domain.models import SUPPORTED_EXTENSIONS
from audiobatch.shared.logging import get_logger

logger = get_logger(__name__)


DEFAULT_CONCURRENCY = 5
DEFAULT_POLL_INTERVAL = 1.0


@dataclass
class BatchConfig:
    """Configuration for a batch run."""

    # Credentials
    api_key: Optional[str] = None
    workflow_id: Optional[str] = None

    # Input/Output
    input_folder: Optional[Path] = None
    output_folder: Path = Path("./output")

    # Scheduling
    concurrency: int = DEFAULT_CONCURRENCY
    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_timeout: Optional[float] = None
    abort_pending_on_cancel: bool = False
    extensions: Tuple[str, ...] = field(default_factory=lambda: SUPPORTED_EXTENSIONS)

    # API
    api_base: Optional[str] = None

    # Misc
    log_file: Optional[Path] = None

    def __post_init__(self):
        """Normalize and validate configuration after initialization."""
        if self.input_folder is not None:
            self.input_folder = Path(self.input_folder)
        self.output_folder = Path(self.output_folder)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)
        if isinstance(self.extensions, str):
            self.extensions = tuple(e.strip() for e in self.extensions.split(',') if e.strip())
        else:
            self.extensions = tuple(self.extensions)
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int) or self.concurrency < 1:
            raise ConfigurationError(f"Concurrency must be a positive integer, got: {self.concurrency}")

        if self.poll_interval <= 0:
            raise ConfigurationError(f"Poll interval must be positive, got: {self.poll_interval}")

        if self.poll_timeout is not None and self.poll_timeout <= 0:
            raise ConfigurationError(f"Poll timeout must be positive, got: {self.poll_timeout}")

        if not self.extensions:
            raise ConfigurationError("At least one file extension is required")

    def require_credentials(self) -> None:
        """
        Fail fast when the API key or workflow id is missing.

        Raises:
            ConfigurationError: If either value is empty
        """
        if not self.api_key:
            raise ConfigurationError("api_key is required (set AUDIOBATCH_API_KEY or --api-key)")
        if not self.workflow_id:
            raise ConfigurationError("workflow_id is required (set AUDIOBATCH_WORKFLOW or --workflow)")

    def masked(self) -> Dict[str, Any]:
        """Config as a dict with the API key hidden, for debug output."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if data.get('api_key'):
            data['api_key'] = data['api_key'][:4] + '***'
        return {k: str(v) if isinstance(v, Path) else v for k, v in data.items()}


class ConfigLoader:
    """Loads and validates configuration from YAML files and environment variables."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to YAML config file
        """
        self.config_path = Path(config_path) if config_path else Path("audiobatch.yaml")
        self._logger = get_logger(__name__)

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> BatchConfig:
        """
        Load configuration from file and environment.

        Precedence: CLI overrides > environment variables > config file.

        Returns:
            BatchConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {}

        if self.config_path.exists():
            self._logger.info(f"Loading config from {self.config_path}")
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(yaml_config, dict):
                raise ConfigurationError(f"Config file {self.config_path} must contain a mapping")
            config_dict.update(yaml_config)
        else:
            self._logger.debug(f"Config file not found: {self.config_path}")

        config_dict.update(self._load_from_env())

        if overrides:
            for k, v in overrides.items():
                if v is None:
                    continue
                config_dict[k] = v

        valid_fields = {f.name for f in fields(BatchConfig)}
        unknown = sorted(set(config_dict) - valid_fields)
        if unknown:
            self._logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        filtered_config = {k: v for k, v in config_dict.items() if k in valid_fields}

        try:
            return BatchConfig(**filtered_config)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        if api_key := os.getenv("AUDIOBATCH_API_KEY"):
            env_config["api_key"] = api_key

        if workflow := os.getenv("AUDIOBATCH_WORKFLOW"):
            env_config["workflow_id"] = workflow

        if input_folder := os.getenv("AUDIOBATCH_INPUT"):
            env_config["input_folder"] = Path(input_folder)

        if output_folder := os.getenv("AUDIOBATCH_OUTPUT"):
            env_config["output_folder"] = Path(output_folder)

        if concurrency := os.getenv("AUDIOBATCH_CONCURRENCY"):
            try:
                env_config["concurrency"] = int(concurrency)
            except ValueError:
                self._logger.warning(f"Invalid AUDIOBATCH_CONCURRENCY value: {concurrency}")

        if poll_interval := os.getenv("AUDIOBATCH_POLL_INTERVAL"):
            try:
                env_config["poll_interval"] = float(poll_interval)
            except ValueError:
                self._logger.warning(f"Invalid AUDIOBATCH_POLL_INTERVAL value: {poll_interval}")

        if poll_timeout := os.getenv("AUDIOBATCH_POLL_TIMEOUT"):
            try:
                env_config["poll_timeout"] = float(poll_timeout)
            except ValueError:
                self._logger.warning(f"Invalid AUDIOBATCH_POLL_TIMEOUT value: {poll_timeout}")

        if api_base := os.getenv("AUDIOBATCH_API_BASE"):
            env_config["api_base"] = api_base

        if abort_pending := os.getenv("AUDIOBATCH_ABORT_PENDING"):
            env_config["abort_pending_on_cancel"] = abort_pending.lower() in ("true", "1", "yes")

        if log_file := os.getenv("AUDIOBATCH_LOG_FILE"):
            env_config["log_file"] = Path(log_file)

        return env_config
