"""
Configuration System Tests
==========================
Verifies that the configuration management system works correctly.
"""

import os
import sys
import tempfile
from dataclasses import FrozenInstanceError

import pytest

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from utility_filter.config import (
    AppConfig,
    WeightConfig,
    ThresholdConfig,
    get_config,
    set_config,
    reset_config,
    apply_environment_overrides,
    get_calibration_config,
    get_development_config,
    get_production_config,
)


def test_default_config():
    """Test that default configuration is created correctly."""
    reset_config()
    config = get_config()

    assert config is not None
    assert config.scoring.strategy == "pareto_utility"
    assert config.scoring.weights.approval == 0.45
    assert config.scoring.thresholds.tier_green == 70.0
    assert config.scoring.thresholds.tier_yellow == 45.0
    assert config.flask.port == 5000

    print("[PASS] Default configuration test passed")


def test_config_singleton():
    """Test that get_config returns the same instance."""
    reset_config()
    config1 = get_config()
    config2 = get_config()

    assert config1 is config2

    custom = AppConfig()
    set_config(custom)
    assert get_config() is custom
    reset_config()

    print("[PASS] Singleton test passed")


def test_default_weights():
    """Test the documented default weights."""
    weights = WeightConfig()

    assert weights.approval == 0.45
    assert weights.velocity == 0.25
    assert weights.integrity == 0.15
    assert weights.volume == 0.10
    assert weights.clickbait == 0.025
    assert weights.positive_budget == pytest.approx(0.95)

    classic = WeightConfig.classic()
    assert classic.integrity == 0.20
    assert classic.clickbait == 0.0

    print("[PASS] Default weights test passed")


def test_weights_are_immutable():
    """Weights and thresholds cannot be mutated after construction."""
    weights = WeightConfig()
    thresholds = ThresholdConfig()

    with pytest.raises(FrozenInstanceError):
        weights.approval = 0.9
    with pytest.raises(FrozenInstanceError):
        thresholds.tier_green = 10.0

    print("[PASS] Immutability test passed")


def test_invalid_weights_rejected():
    """Negative weights and an oversized clickbait weight are rejected."""
    with pytest.raises(ValueError):
        WeightConfig(approval=-0.1)

    with pytest.raises(ValueError):
        WeightConfig(approval=0.1, velocity=0.0, integrity=0.0, volume=0.0, clickbait=0.5)

    print("[PASS] Invalid weights test passed")


def test_invalid_thresholds_rejected():
    """Inconsistent thresholds are rejected at construction."""
    with pytest.raises(ValueError):
        ThresholdConfig(approval_floor=0.98, approval_ceiling=0.92)
    with pytest.raises(ValueError):
        ThresholdConfig(tier_yellow=80.0)
    with pytest.raises(ValueError):
        ThresholdConfig(slop_penalty=1.5)
    with pytest.raises(ValueError):
        ThresholdConfig(min_subscribers=0)
    with pytest.raises(ValueError):
        ThresholdConfig(confidence_low=60)

    print("[PASS] Invalid thresholds test passed")


def test_classic_thresholds():
    """The classic preset only moves the yellow cutoff."""
    classic = ThresholdConfig.classic()
    default = ThresholdConfig()

    assert classic.tier_yellow == 40.0
    assert classic.tier_green == default.tier_green
    assert classic.slop_penalty == default.slop_penalty

    print("[PASS] Classic thresholds test passed")


def test_config_serialization():
    """Test configuration save and load."""
    config = AppConfig()
    config.experiment.experiment_name = "test_experiment"
    config.scoring.thresholds = ThresholdConfig(tier_yellow=40.0)
    config.scoring.weights = WeightConfig(approval=0.5)

    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        temp_path = f.name

    try:
        config.save(temp_path)
        loaded_config = AppConfig.load(temp_path)

        assert loaded_config.experiment.experiment_name == "test_experiment"
        assert loaded_config.scoring.thresholds.tier_yellow == 40.0
        assert loaded_config.scoring.weights.approval == 0.5
        assert loaded_config.scoring.weights == config.scoring.weights
        assert loaded_config.paths.base_dir == config.paths.base_dir

        print("[PASS] Serialization test passed")
    finally:
        os.unlink(temp_path)


def test_presets():
    """Test configuration presets."""
    dev = get_development_config()
    assert dev.flask.debug is True
    assert dev.experiment.log_level == "DEBUG"

    prod = get_production_config()
    assert prod.flask.debug is False
    assert prod.experiment.log_decisions is False

    calibration = get_calibration_config("yellow_40", classic_tiers=True)
    assert calibration.experiment.experiment_name == "yellow_40"
    assert calibration.scoring.thresholds.tier_yellow == 40.0

    print("[PASS] Presets test passed")


def test_environment_overrides(monkeypatch):
    """Test environment variable overrides."""
    monkeypatch.setenv("UTILITY_FILTER_THRESHOLDS_TIER_YELLOW", "40")
    monkeypatch.setenv("UTILITY_FILTER_WEIGHTS_APPROVAL", "0.5")
    monkeypatch.setenv("UTILITY_FILTER_FLASK_PORT", "8080")
    monkeypatch.setenv("UTILITY_FILTER_EXPERIMENT_LOG_SCORES", "false")

    config = AppConfig()
    original_thresholds = config.scoring.thresholds
    apply_environment_overrides(config)

    assert config.scoring.thresholds.tier_yellow == 40.0
    assert config.scoring.weights.approval == 0.5
    assert config.flask.port == 8080
    assert config.experiment.log_scores is False

    # Frozen sections are replaced, not mutated
    assert original_thresholds.tier_yellow == 45.0

    print("[PASS] Environment override test passed")


def test_invalid_environment_override_ignored(monkeypatch):
    """An override that fails validation leaves the section untouched."""
    monkeypatch.setenv("UTILITY_FILTER_THRESHOLDS_TIER_YELLOW", "95")
    monkeypatch.setenv("UTILITY_FILTER_FLASK_PORT", "not-a-port")

    config = AppConfig()
    apply_environment_overrides(config)

    assert config.scoring.thresholds.tier_yellow == 45.0
    assert config.flask.port == 5000

    print("[PASS] Invalid environment override test passed")


def test_port_shortcut(monkeypatch):
    """PORT maps to flask.port."""
    monkeypatch.setenv("PORT", "9090")

    config = AppConfig()
    apply_environment_overrides(config)

    assert config.flask.port == 9090

    print("[PASS] PORT shortcut test passed")


def test_paths_created():
    """Test that path directories are created."""
    reset_config()
    config = get_config()

    assert config.paths.logs.exists()
    assert config.paths.experiments.exists()

    print("[PASS] Path creation test passed")


def test_config_to_dict():
    """Test configuration dictionary export."""
    config = AppConfig()
    config_dict = config.to_dict()

    assert isinstance(config_dict, dict)
    assert 'scoring' in config_dict
    assert 'flask' in config_dict
    assert config_dict['scoring']['weights']['approval'] == 0.45
    assert config_dict['scoring']['thresholds']['tier_yellow'] == 45.0
    assert isinstance(config_dict['paths']['base_dir'], str)

    print("[PASS] Config to_dict test passed")


def run_all_tests():
    """Run all configuration tests."""
    print("\n" + "="*60)
    print("CONFIGURATION SYSTEM TESTS")
    print("="*60 + "\n")

    test_default_config()
    test_config_singleton()
    test_default_weights()
    test_weights_are_immutable()
    test_invalid_weights_rejected()
    test_invalid_thresholds_rejected()
    test_classic_thresholds()
    test_config_serialization()
    test_presets()
    test_paths_created()
    test_config_to_dict()

    print("\n" + "="*60)
    print("ALL CONFIGURATION TESTS PASSED")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_all_tests()
