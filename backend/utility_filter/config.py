"""
Configuration Management Module
===============================
Centralized configuration system for the Utility Filter scoring service.

This module provides:
- Type-safe configuration via dataclasses
- Immutable scoring weights and thresholds that can be injected per scorer
- Environment variable overrides
- Calibration experiment configuration support

Usage:
    from utility_filter.config import get_config
    config = get_config()

    # Access configuration
    approval_weight = config.scoring.weights.approval
    green_cutoff = config.scoring.thresholds.tier_green

For calibration runs, create a config file and load it:
    config = load_experiment_config("experiments/tier_yellow_40.json")
"""

from dataclasses import dataclass, field, fields, replace, is_dataclass
from pathlib import Path
from typing import Optional, Tuple
import os
import json
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# SCORING CONFIGURATION (IMMUTABLE)
# =============================================================================

@dataclass(frozen=True)
class WeightConfig:
    """
    Weights for combining the component scores into the composite.

    The four additive weights form the "positive budget" (0.95 by default).
    Clickbait is purely subtractive and may never exceed that budget, so it
    can pull a composite down but never invert it.

    Composite:
        C = Wa*A + Wv*Volume + Wg*Velocity + Wi*Integrity - Wc*Clickbait
    """

    approval: float = 0.45    # Ratio quality dominates
    velocity: float = 0.25    # Hidden gem detection
    integrity: float = 0.15   # Interaction rate vs views
    volume: float = 0.10      # Absolute engagement magnitude
    clickbait: float = 0.025  # Subtractive

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"Weight '{f.name}' must be non-negative, got {value}")
        if self.clickbait > self.positive_budget:
            raise ValueError(
                f"Clickbait weight {self.clickbait} exceeds the additive budget "
                f"{self.positive_budget}"
            )

    @property
    def positive_budget(self) -> float:
        """Sum of the additive weights."""
        return self.approval + self.velocity + self.integrity + self.volume

    @classmethod
    def classic(cls) -> "WeightConfig":
        """Weights of the older four-factor model (no clickbait penalty)."""
        return cls(approval=0.45, velocity=0.25, integrity=0.20, volume=0.10, clickbait=0.0)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Every constant that governs rescaling, decay, floors and tiers.

    Like ratios on the platform cluster between 92% and 98% (median ~96%),
    so the approval window maps 0.92 -> 0.0, 0.95 -> 0.5 and 0.98 -> 1.0.

    TIER CUTOFFS: two calibrations exist for the yellow cutoff, 45 (current)
    and 40 (older four-factor model, see ``classic()``). It is a calibration
    parameter, not a behavioral branch.
    """

    # Input floors
    min_subscribers: int = 1
    min_days_old: float = 0.1
    min_views: int = 1

    # Bayesian smoothing
    prior_weight: float = 10.0   # K: prior sample weight
    prior_mean: float = 0.5      # MU: prior mean

    # Approval rescaling
    approval_floor: float = 0.92
    approval_ceiling: float = 0.98

    # Volume
    volume_breakpoint_high: int = 10000

    # Velocity
    velocity_ref: float = 50.0            # views/subs ratio that maps to 1.0
    velocity_days_optimal: float = 7.0    # Recency bonus window
    velocity_days_penalty: float = 365.0  # Stale content horizon
    recency_max_bonus: float = 0.2        # Up to 20% boost for fresh content

    # Integrity
    integrity_target: float = 0.03  # 3% interaction rate = full credit

    # Temporal decay
    decay_rate: float = 0.95  # 5% annual decay

    # Anti-bot hard floor
    slop_threshold: float = 0.001
    slop_min_views: int = 5000
    slop_penalty: float = 0.5

    # Confidence
    confidence_full: int = 50
    confidence_low: int = 5

    # Tiers
    tier_green: float = 70.0
    tier_yellow: float = 45.0

    # Clickbait detection
    clickbait_caps_threshold: float = 0.5
    clickbait_caps_min_letters: int = 3
    clickbait_caps_signal: float = 0.4
    clickbait_keyword_signal: float = 0.2
    clickbait_keyword_cap: float = 0.4
    clickbait_emoji_threshold: int = 3
    clickbait_emoji_signal: float = 0.2

    # Explanation cutoffs
    weak_component: float = 0.3
    clickbait_warning: float = 0.3
    decay_warning: float = 0.7

    def __post_init__(self):
        if self.approval_floor >= self.approval_ceiling:
            raise ValueError("approval_floor must be below approval_ceiling")
        if self.tier_yellow > self.tier_green:
            raise ValueError("tier_yellow must not exceed tier_green")
        if self.confidence_low > self.confidence_full:
            raise ValueError("confidence_low must not exceed confidence_full")
        if not 0.0 <= self.slop_penalty <= 1.0:
            raise ValueError("slop_penalty must be in [0, 1]")
        if not 0.0 < self.decay_rate <= 1.0:
            raise ValueError("decay_rate must be in (0, 1]")
        if self.min_subscribers <= 0 or self.min_days_old <= 0 or self.min_views <= 0:
            raise ValueError("Divisor floors must be strictly positive")
        for name in ('velocity_ref', 'volume_breakpoint_high', 'velocity_days_optimal',
                     'velocity_days_penalty', 'integrity_target', 'prior_weight'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be strictly positive")

    @classmethod
    def classic(cls) -> "ThresholdConfig":
        """Thresholds of the older four-factor model (yellow cutoff at 40)."""
        return cls(tier_yellow=40.0)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================

@dataclass
class PathConfig:
    """Configuration for file system paths."""

    # Base directory (defaults to package directory)
    base_dir: Path = field(default_factory=lambda: Path(__file__).parent)

    logs_dir: str = "logs"
    experiments_dir: str = "experiments"

    @property
    def logs(self) -> Path:
        return self.base_dir / self.logs_dir

    @property
    def experiments(self) -> Path:
        return self.base_dir / self.experiments_dir

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        for dir_path in [self.logs, self.experiments]:
            dir_path.mkdir(parents=True, exist_ok=True)


@dataclass
class ScoringConfig:
    """
    Configuration for the utility scoring engine.

    The weights and thresholds are frozen; swapping them means assigning a
    new instance, which leaves any scorer already built with the old ones
    untouched.

    Strategies:
    - 'pareto_utility': five-factor model with decay, slop floor and
      confidence (canonical)
    - 'classic': older four-factor model kept for comparison
    """

    strategy: str = "pareto_utility"
    weights: WeightConfig = field(default_factory=WeightConfig)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)


@dataclass
class FlaskConfig:
    """Configuration for Flask web server."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False

    # Security
    secret_key: str = field(default_factory=lambda: os.getenv("FLASK_SECRET_KEY", "dev-secret-key"))

    # CORS
    cors_origins: list = field(default_factory=lambda: ["*"])

    # Listing pages rarely show more than a few hundred thumbnails
    max_batch_size: int = 500


@dataclass
class ExperimentConfig:
    """Configuration for calibration experiments and log output."""

    # Experiment identification
    experiment_name: str = "default"
    experiment_version: str = "1.0.0"

    # Logging
    log_level: str = "INFO"
    log_scores: bool = True
    log_decisions: bool = True
    log_to_file: bool = True


@dataclass
class AppConfig:
    """
    Master configuration class that aggregates all configuration sections.

    This is the main configuration object used throughout the application.
    """

    paths: PathConfig = field(default_factory=PathConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    flask: FlaskConfig = field(default_factory=FlaskConfig)
    experiment: ExperimentConfig = field(default_factory=ExperimentConfig)

    def __post_init__(self):
        """Ensure all directories exist after initialization."""
        self.paths.ensure_directories()

    def to_dict(self) -> dict:
        """Convert configuration to dictionary for serialization."""
        def convert(obj):
            if is_dataclass(obj):
                return {f.name: convert(getattr(obj, f.name)) for f in fields(obj)}
            elif isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, (set, tuple)):
                return list(obj)
            return obj
        return convert(self)

    def save(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Configuration saved to {filepath}")

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        """Create configuration from dictionary."""
        # PathConfig needs base_dir back as a Path
        paths_data = dict(data.get('paths', {}))
        if 'base_dir' in paths_data and isinstance(paths_data['base_dir'], str):
            paths_data['base_dir'] = Path(paths_data['base_dir'])

        scoring_data = dict(data.get('scoring', {}))
        scoring = ScoringConfig(
            strategy=scoring_data.get('strategy', 'pareto_utility'),
            weights=WeightConfig(**scoring_data.get('weights', {})),
            thresholds=ThresholdConfig(**scoring_data.get('thresholds', {})),
        )

        return cls(
            paths=PathConfig(**paths_data),
            scoring=scoring,
            flask=FlaskConfig(**data.get('flask', {})),
            experiment=ExperimentConfig(**data.get('experiment', {})),
        )

    @classmethod
    def load(cls, filepath: str) -> "AppConfig":
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        logger.info(f"Configuration loaded from {filepath}")
        return cls.from_dict(data)


# =============================================================================
# GLOBAL CONFIGURATION SINGLETON
# =============================================================================

_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the global application configuration.

    Creates a default configuration on first access.

    Returns:
        The global AppConfig instance
    """
    global _config
    if _config is None:
        _config = AppConfig()
        logger.info("Initialized default application configuration")
    return _config


def set_config(config: AppConfig) -> None:
    """
    Set the global application configuration.

    Use this to load a custom configuration for calibration runs.

    Args:
        config: The AppConfig instance to use globally
    """
    global _config
    _config = config
    logger.info(f"Set global configuration (experiment: {config.experiment.experiment_name})")


def reset_config() -> None:
    """Reset the global configuration to None (forces reload on next get_config)."""
    global _config
    _config = None
    logger.info("Reset global configuration")


def load_experiment_config(filepath: str) -> AppConfig:
    """
    Load an experiment configuration and set it as global.

    Args:
        filepath: Path to the configuration JSON file

    Returns:
        The loaded AppConfig instance
    """
    config = AppConfig.load(filepath)
    set_config(config)
    return config


# =============================================================================
# ENVIRONMENT VARIABLE OVERRIDES
# =============================================================================

ENV_PREFIX = "UTILITY_FILTER_"


def _coerce(current_value, value: str):
    """Convert an environment string to the type of the current value."""
    if isinstance(current_value, bool):
        return value.lower() in ('true', '1', 'yes')
    elif isinstance(current_value, int):
        return int(value)
    elif isinstance(current_value, float):
        return float(value)
    return value


def _section_target(config: AppConfig, section: str) -> Tuple[object, str]:
    """Return (parent object, attribute name) holding a config section."""
    section_map = {
        'weights': (config.scoring, 'weights'),
        'thresholds': (config.scoring, 'thresholds'),
        'scoring': (config, 'scoring'),
        'flask': (config, 'flask'),
        'experiment': (config, 'experiment'),
    }
    return section_map.get(section, (None, ''))


def apply_environment_overrides(config: AppConfig) -> AppConfig:
    """
    Apply environment variable overrides to configuration.

    Environment variables follow the pattern:
    UTILITY_FILTER_{SECTION}_{KEY}

    Examples:
        UTILITY_FILTER_WEIGHTS_APPROVAL=0.5
        UTILITY_FILTER_THRESHOLDS_TIER_YELLOW=40
        UTILITY_FILTER_FLASK_PORT=8080
        UTILITY_FILTER_EXPERIMENT_LOG_LEVEL=DEBUG

    Also supports:
        PORT=8080 (maps to flask.port)

    Frozen sections (weights, thresholds) are rebuilt with the new value,
    so validation runs again and invalid overrides are rejected.

    Args:
        config: Base configuration to override

    Returns:
        Configuration with environment overrides applied
    """
    if os.getenv("PORT"):
        try:
            config.flask.port = int(os.getenv("PORT"))
            logger.info(f"Environment override: flask.port = {config.flask.port}")
        except ValueError:
            logger.warning(f"Ignoring non-integer PORT: {os.getenv('PORT')}")

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        parts = key[len(ENV_PREFIX):].lower().split('_', 1)
        if len(parts) != 2:
            continue

        section, attr = parts
        parent, attr_name = _section_target(config, section)
        if parent is None:
            continue

        section_config = getattr(parent, attr_name)
        if not hasattr(section_config, attr):
            continue

        current_value = getattr(section_config, attr)
        try:
            typed_value = _coerce(current_value, value)
            if section in ('weights', 'thresholds'):
                setattr(parent, attr_name, replace(section_config, **{attr: typed_value}))
            else:
                setattr(section_config, attr, typed_value)
            logger.info(f"Environment override: {section}.{attr} = {typed_value}")

        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to apply environment override {key}: {e}")

    return config


# =============================================================================
# PRESET CONFIGURATIONS FOR COMMON SCENARIOS
# =============================================================================

def get_development_config() -> AppConfig:
    """Get configuration optimized for development."""
    config = AppConfig()
    config.flask.debug = True
    config.experiment.log_level = "DEBUG"
    return config


def get_production_config() -> AppConfig:
    """Get configuration optimized for production."""
    config = AppConfig()
    config.flask.debug = False
    config.experiment.log_level = "INFO"
    config.experiment.log_decisions = False
    return config


def get_calibration_config(experiment_name: str, classic_tiers: bool = False) -> AppConfig:
    """
    Get configuration for an A/B calibration experiment.

    Args:
        experiment_name: Name used to tag log files
        classic_tiers: Use the older yellow cutoff (40 instead of 45)
    """
    config = AppConfig()
    config.experiment.experiment_name = experiment_name
    config.experiment.log_scores = True
    config.experiment.log_decisions = True
    config.experiment.log_level = "DEBUG"
    if classic_tiers:
        config.scoring.thresholds = ThresholdConfig.classic()
    return config
