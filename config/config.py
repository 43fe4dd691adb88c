import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from commitment import CommitmentKey

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ElectionConfig:
    election_id: str = "election_2025"
    commitment_domain: str = "anon-vote/pedersen/v1"
    num_voters: int = 8
    seed: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.election_id, str) or not self.election_id:
            raise ValueError("election_id must be a non-empty string")
        if not isinstance(self.commitment_domain, str) or not self.commitment_domain:
            raise ValueError("commitment_domain must be a non-empty string")
        # bool is an int subclass; "num_voters: yes" is not a count
        if isinstance(self.num_voters, bool) or not isinstance(self.num_voters, int):
            raise ValueError(f"num_voters must be an integer, got {self.num_voters!r}")
        if self.num_voters < 1:
            raise ValueError("num_voters must be at least 1")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ValueError(f"seed must be an integer or null, got {self.seed!r}")

    def election_id_bytes(self) -> bytes:
        return self.election_id.encode('utf-8')

    def commitment_key(self) -> CommitmentKey:
        return CommitmentKey.derive(self.commitment_domain.encode('utf-8'))


@dataclass
class SystemConfig:
    election: ElectionConfig = field(default_factory=ElectionConfig)

    log_dir: Path = field(default_factory=lambda: Path("logs"))
    results_dir: Path = field(default_factory=lambda: Path("results"))
    log_level: str = "INFO"
    enable_benchmarking: bool = True
    enable_debug_mode: bool = False

    def __post_init__(self):
        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")
        self.log_level = self.log_level.upper()

        self.log_dir = Path(self.log_dir)
        self.results_dir = Path(self.results_dir)

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.results_dir.mkdir(parents=True, exist_ok=True)

        if self.enable_debug_mode:
            self.log_level = "DEBUG"


def load_config(config_path: Optional[Path] = None) -> SystemConfig:
    """Load configuration from file or return default"""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            election_data = config_data.get('election', {})
            election_config = ElectionConfig(
                election_id=election_data.get('election_id', 'election_2025'),
                commitment_domain=election_data.get(
                    'commitment_domain', 'anon-vote/pedersen/v1'),
                num_voters=election_data.get('num_voters', 8),
                seed=election_data.get('seed')
            )

            return SystemConfig(
                election=election_config,
                log_dir=Path(config_data.get('log_dir', 'logs')),
                results_dir=Path(config_data.get('results_dir', 'results')),
                log_level=config_data.get('log_level', 'INFO'),
                enable_benchmarking=config_data.get(
                    'enable_benchmarking', True),
                enable_debug_mode=config_data.get('enable_debug_mode', False)
            )
        except (OSError, yaml.YAMLError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Could not load config file {config_path}: {e}")
            logger.warning("Using default configuration")

    return SystemConfig()


def save_config(config: SystemConfig, config_path: Optional[Path] = None):
    """Save configuration to YAML file"""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    config_data = {
        'election': {
            'election_id': config.election.election_id,
            'commitment_domain': config.election.commitment_domain,
            'num_voters': config.election.num_voters,
            'seed': config.election.seed
        },
        'log_dir': str(config.log_dir),
        'results_dir': str(config.results_dir),
        'log_level': config.log_level,
        'enable_benchmarking': config.enable_benchmarking,
        'enable_debug_mode': config.enable_debug_mode
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w') as f:
        yaml.safe_dump(config_data, f, default_flow_style=False)
