"""
Configuration for the analysis job and CLI.

The calculation engines never read configuration themselves: callers build a
SamplingPolicy (or take the default) and pass it in explicitly.
"""

import os
import math
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv

from riskmetrics.errors import MetricsError
from riskmetrics.calculations.sampling import (
    SamplingPolicy,
    TRADING_PERIODS_PER_YEAR,
    CALENDAR_DAYS_PER_YEAR
)

# Load environment variables
load_dotenv()


DEFAULT_PERIODS_PER_YEAR = TRADING_PERIODS_PER_YEAR
DEFAULT_DAYS_PER_YEAR = CALENDAR_DAYS_PER_YEAR
DEFAULT_DDOF = 1
DEFAULT_RISK_FREE_RATE_PCT = 4.25
DEFAULT_TIE_EPSILON = 0.01
DEFAULT_MIN_ALIGNED_POINTS = 10


class ConfigError(MetricsError):
    """Raised when configuration values are invalid."""
    pass


@dataclass
class AnalysisConfig:
    """Settings for a multi-asset analysis run."""
    risk_free_rate_pct: float = DEFAULT_RISK_FREE_RATE_PCT
    ddof: int = DEFAULT_DDOF
    tie_epsilon: float = DEFAULT_TIE_EPSILON
    min_aligned_points: int = DEFAULT_MIN_ALIGNED_POINTS
    sampling: SamplingPolicy = field(default_factory=SamplingPolicy)

    def __post_init__(self):
        """Validate settings."""
        if self.ddof not in (0, 1):
            raise ConfigError(f"ddof must be 0 or 1, got {self.ddof}")

        if not math.isfinite(self.risk_free_rate_pct):
            raise ConfigError("risk_free_rate_pct must be finite")

        if self.tie_epsilon < 0:
            raise ConfigError("tie_epsilon must be non-negative")

        if self.min_aligned_points < 2:
            raise ConfigError("min_aligned_points must be at least 2")


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"Invalid value for {name}: {raw!r}")


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Load analysis settings from a YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Dictionary of settings (empty if the file has no content)

    Raises:
        ConfigError: If the file is missing or not a mapping
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file {config_path}: {e}")

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    return data


def load_config(config_path: Optional[str] = None) -> AnalysisConfig:
    """
    Build analysis configuration from environment variables and optional YAML.

    Values from the YAML file override environment variables, which override
    the built-in defaults.

    Args:
        config_path: Path to YAML file (defaults to $RISKMETRICS_CONFIG if set)

    Returns:
        Validated AnalysisConfig

    Raises:
        ConfigError: If any value is missing, unknown or invalid
    """
    settings = {
        'risk_free_rate_pct': _env_number('RISK_FREE_RATE_PCT', DEFAULT_RISK_FREE_RATE_PCT, float),
        'ddof': _env_number('RISKMETRICS_DDOF', DEFAULT_DDOF, int),
        'tie_epsilon': _env_number('RISKMETRICS_TIE_EPSILON', DEFAULT_TIE_EPSILON, float),
        'min_aligned_points': _env_number('RISKMETRICS_MIN_ALIGNED_POINTS', DEFAULT_MIN_ALIGNED_POINTS, int),
        'periods_per_year': _env_number('RISKMETRICS_PERIODS_PER_YEAR', DEFAULT_PERIODS_PER_YEAR, int),
        'days_per_year': _env_number('RISKMETRICS_DAYS_PER_YEAR', DEFAULT_DAYS_PER_YEAR, int),
    }

    if config_path is None:
        config_path = os.getenv('RISKMETRICS_CONFIG') or None

    if config_path is not None:
        file_settings = load_config_file(Path(config_path))
        unknown = set(file_settings) - set(settings)
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")
        settings.update(file_settings)

    try:
        sampling = SamplingPolicy(
            periods_per_year=int(settings['periods_per_year']),
            days_per_year=int(settings['days_per_year'])
        )
        return AnalysisConfig(
            risk_free_rate_pct=float(settings['risk_free_rate_pct']),
            ddof=int(settings['ddof']),
            tie_epsilon=float(settings['tie_epsilon']),
            min_aligned_points=int(settings['min_aligned_points']),
            sampling=sampling
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}")
    except ConfigError:
        raise
    except MetricsError as e:
        raise ConfigError(str(e))
