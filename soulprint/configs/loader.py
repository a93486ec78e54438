"""
Configuration loading and validation.

This module handles loading of YAML configuration files and
checks the values the scoring components depend on.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

logger = logging.getLogger(__name__)

KNOWN_SECTIONS = ["global", "extraction", "accumulator", "fusion",
                  "compatibility", "prediction", "persistence"]

FUSION_MODES = ["auto", "weighted_average", "confidence_based", "dynamic", "consensus"]


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the file is empty
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Missing sections are not errors: every component falls back to its
    defaults. Only values that would break an invariant are reported.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    for section in config:
        if section not in KNOWN_SECTIONS:
            issues.append(f"Unknown section: {section}")

    alpha = get_config_value(config, "accumulator.smoothing_alpha", 0.3)
    if not 0 < alpha <= 1:
        issues.append(f"Smoothing alpha must be in (0, 1], got {alpha}")

    cap = get_config_value(config, "extraction.single_message_confidence_cap", 0.8)
    if not 0 < cap <= 1:
        issues.append(f"Single-message confidence cap must be in (0, 1], got {cap}")

    # Method weights must sum to 1
    weights = get_config_value(config, "compatibility.method_weights")
    if weights:
        total = sum(weights.values())
        if abs(total - 1.0) > 0.01:
            issues.append(f"Compatibility method weights don't sum to 1: {total}")
        for name, value in weights.items():
            if value < 0:
                issues.append(f"Compatibility weight {name} is negative: {value}")

    for key in ["attraction_exponent", "repulsion_exponent"]:
        value = get_config_value(config, f"compatibility.harmony.{key}", 1.0)
        if value <= 0:
            issues.append(f"compatibility.harmony.{key} must be positive, got {value}")

    mode = get_config_value(config, "fusion.mode", "auto")
    if mode not in FUSION_MODES:
        issues.append(f"Unknown fusion mode: {mode}")

    backend = get_config_value(config, "persistence.backend", "memory")
    if backend not in ["memory", "json"]:
        issues.append(f"Unknown persistence backend: {backend}")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "compatibility.harmony.attraction_exponent")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
