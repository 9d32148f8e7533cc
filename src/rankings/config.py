"""
Ranking configuration loading and validation.

The configuration is a small YAML document:

    normalization:
      policy: target-sum        # target-sum | unit-variance | mean-based
      target_total: 500
    fields:
      - Machine Learning
      - ...
    faculty:
      main_field_ratio: 0.3

Unknown policy names are rejected when the config is built. Every number in
the leaderboard depends on the policy, so a typo must never fall back to a
default silently.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import jsonschema
import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/ranking.yaml")
DEFAULT_SCHEMA_PATH = Path("config/schemas/ranking_config.schema.json")

DEFAULT_TARGET_TOTAL = 500.0
DEFAULT_MAIN_FIELD_RATIO = 0.3

# Fields ranked when nothing else is selected
DEFAULT_FIELDS: Tuple[str, ...] = (
    "Machine Learning",
    "Computer Vision & Image Processing",
    "Natural Language Processing",
    "The Web & Information Retrieval",
)


class ConfigError(Exception):
    """Raised when the ranking configuration is invalid."""
    pass


class NormalizationPolicy(str, Enum):
    """
    How raw per-field scores are made comparable across fields.

    The policies are mutually exclusive alternatives:
        TARGET_SUM    - rescale so each field sums to target_total
        UNIT_VARIANCE - divide by the field's sample standard deviation
        MEAN_BASED    - divide by the field's mean contributor score
    """
    TARGET_SUM = "target-sum"
    UNIT_VARIANCE = "unit-variance"
    MEAN_BASED = "mean-based"

    @classmethod
    def from_name(cls, name: Any) -> "NormalizationPolicy":
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower() if name is not None else ""
        for policy in cls:
            if policy.value == key:
                return policy
        valid = ", ".join(p.value for p in cls)
        raise ConfigError(f"Unknown normalization policy '{name}' (expected one of: {valid})")


@dataclass(frozen=True)
class RankingConfig:
    policy: NormalizationPolicy = NormalizationPolicy.TARGET_SUM
    target_total: float = DEFAULT_TARGET_TOTAL
    default_fields: Tuple[str, ...] = DEFAULT_FIELDS
    main_field_ratio: float = DEFAULT_MAIN_FIELD_RATIO

    def __post_init__(self):
        # Accept plain strings so callers can write RankingConfig(policy="mean-based")
        object.__setattr__(self, "policy", NormalizationPolicy.from_name(self.policy))
        object.__setattr__(self, "default_fields", tuple(self.default_fields))
        if not self.default_fields:
            raise ConfigError("At least one field must be configured")


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load raw ranking configuration from a YAML file.

    Args:
        config_path: Path to ranking.yaml

    Returns:
        Parsed config dictionary (empty dict for an empty file)

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If config is invalid YAML
    """
    with open(config_path, 'r') as f:
        try:
            return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_path}: {e}")


def validate_config(
    raw: Dict[str, Any],
    schema_path: Optional[Path] = DEFAULT_SCHEMA_PATH
) -> List[str]:
    """
    Validate ranking configuration against schema and business rules.

    Validation rules:
    1. normalization.policy must be a known policy name
    2. normalization.target_total must be a positive number
    3. fields must be a non-empty list of unique, non-blank strings
    4. faculty.main_field_ratio must be in (0, 1]

    Args:
        raw: Parsed config dictionary
        schema_path: Path to JSON schema (None skips schema validation)

    Returns:
        List of error messages (empty if valid)
    """
    errors: List[str] = []

    if not isinstance(raw, dict):
        return ["Config must be a mapping"]

    if schema_path is not None and schema_path.exists():
        with open(schema_path) as f:
            schema = json.load(f)
        validator = jsonschema.Draft7Validator(schema)
        for e in sorted(validator.iter_errors(raw), key=lambda err: list(err.absolute_path)):
            path = ".".join(str(p) for p in e.absolute_path)
            errors.append(f"{path}: {e.message}" if path else e.message)

    normalization = raw.get("normalization", {})
    if not isinstance(normalization, dict):
        errors.append("'normalization' must be a mapping")
        normalization = {}

    if "policy" in normalization:
        try:
            NormalizationPolicy.from_name(normalization["policy"])
        except ConfigError as e:
            errors.append(str(e))

    if "target_total" in normalization:
        target_total = normalization["target_total"]
        if isinstance(target_total, bool) or not isinstance(target_total, (int, float)):
            errors.append("normalization.target_total must be a number")
        elif target_total <= 0:
            errors.append("normalization.target_total must be positive")

    if "fields" in raw:
        fields = raw["fields"]
        if not isinstance(fields, list) or not fields:
            errors.append("'fields' must be a non-empty list")
        else:
            seen = set()
            for i, name in enumerate(fields):
                if not isinstance(name, str) or not name.strip():
                    errors.append(f"fields[{i}] must be a non-blank string")
                elif name in seen:
                    errors.append(f"Duplicate field: {name}")
                else:
                    seen.add(name)

    faculty = raw.get("faculty", {})
    if not isinstance(faculty, dict):
        errors.append("'faculty' must be a mapping")
        faculty = {}

    if "main_field_ratio" in faculty:
        ratio = faculty["main_field_ratio"]
        if isinstance(ratio, bool) or not isinstance(ratio, (int, float)):
            errors.append("faculty.main_field_ratio must be a number")
        elif not 0 < ratio <= 1:
            errors.append("faculty.main_field_ratio must be in (0, 1]")

    # Schema and manual checks overlap; report each problem once
    return list(dict.fromkeys(errors))


def config_from_dict(
    raw: Dict[str, Any],
    schema_path: Optional[Path] = DEFAULT_SCHEMA_PATH
) -> RankingConfig:
    """
    Build a RankingConfig from a parsed config dictionary.

    Raises:
        ConfigError: If validation fails (message lists every problem)
    """
    errors = validate_config(raw, schema_path=schema_path)
    if errors:
        raise ConfigError("Invalid ranking config: " + "; ".join(errors))

    normalization = raw.get("normalization", {})
    faculty = raw.get("faculty", {})

    config = RankingConfig(
        policy=NormalizationPolicy.from_name(normalization.get("policy", NormalizationPolicy.TARGET_SUM)),
        target_total=float(normalization.get("target_total", DEFAULT_TARGET_TOTAL)),
        default_fields=tuple(f.strip() for f in raw.get("fields", DEFAULT_FIELDS)),
        main_field_ratio=float(faculty.get("main_field_ratio", DEFAULT_MAIN_FIELD_RATIO)),
    )
    logger.debug(
        "Ranking config: policy=%s target_total=%s fields=%d",
        config.policy.value, config.target_total, len(config.default_fields)
    )
    return config


def load_ranking_config(
    config_path: Optional[Path] = None,
    schema_path: Optional[Path] = DEFAULT_SCHEMA_PATH
) -> RankingConfig:
    """Load and validate a config file; no path means built-in defaults."""
    if config_path is None:
        return RankingConfig()
    if not Path(config_path).exists():
        raise ConfigError(f"Config not found: {config_path}")
    return config_from_dict(load_config(config_path), schema_path=schema_path)
