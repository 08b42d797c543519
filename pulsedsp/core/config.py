"""
Configuration Manager
=====================

Process-wide settings for the PulseDSP engine.

Values are layered, later layers winning:

1. DEFAULTS below (camera PPG at 30 fps)
2. Files passed to load(), merged in order (YAML or JSON)
3. configs/<env>.yaml, when set_environment() is called
4. Runtime set() calls

Engine instances do not read the singleton on every call: they take a
private snapshot through resolve_settings() when constructed, with any
per-instance overrides merged on top.

Example Usage:
    ```python
    from pulsedsp.core.config import get_config

    config = get_config()
    config.load('configs/clinic.yaml')

    config.get('processing.bandpass.low_freq')          # 0.5
    config.get_float('quality.thresholds.max_clipping_pct')
    config.set('quality.clipping_method', 'range_band')
    ```

Author: PulseDSP
Date: 2024
"""

from typing import Dict, List, Optional, Any, Union
from pathlib import Path
from copy import deepcopy
import json
import logging
import os
import threading

import yaml

from pulsedsp.core.exceptions import ConfigNotFoundError, ConfigurationError

logger = logging.getLogger(__name__)


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULTS: Dict[str, Any] = {
    'project': {
        'name': 'PulseDSP',
        'version': '1.0.0',
    },
    'processing': {
        'sampling_rate': 30.0,
        'bandpass': {
            'low_freq': 0.5,
            'high_freq': 4.0,
            'filter_order': 4,
            'strict_order': True,
        },
        # 'reverse' runs the second bandpass pass backwards (zero phase)
        'second_pass': 'reverse',
        'outlier_threshold': 3.0,
        'display_range': [0.0, 255.0],
        'result_shape': 'compact',
    },
    'quality': {
        'snr_method': 'residual',
        'clipping_method': 'peak_fraction',
        'motion_method': 'difference_std',
        'peak_fraction_threshold': 0.95,
        'range_band_threshold': 0.98,
        'epsilon': 1e-10,
        'thresholds': {
            'max_clipping_pct': 5.0,
            'max_motion_score': 20.0,
            'min_snr_db': 5.0,
        },
    },
    'spectral': {
        'method': 'radix2',
        'direct_warning_length': 4096,
    },
    'heart_rate': {
        'min_duration_sec': 5.0,
        'min_bpm': 40,
        'max_bpm': 200,
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'file': None,
    },
}

REQUIRED_KEYS = (
    'processing.bandpass.low_freq',
    'processing.bandpass.high_freq',
    'processing.bandpass.filter_order',
    'quality.thresholds.max_clipping_pct',
    'quality.thresholds.max_motion_score',
    'quality.thresholds.min_snr_db',
)

CHOICES = {
    'processing.second_pass': ('reverse', 'forward'),
    'processing.result_shape': ('compact', 'full'),
}

YAML_SUFFIXES = ('.yaml', '.yml')


def deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge update into base in place; nested dicts merge key by key.

    Returns:
        base
    """
    for key, value in update.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            deep_merge(current, value)
        else:
            base[key] = deepcopy(value)
    return base


def _leaf_keys(data: Dict[str, Any], prefix: str = '') -> List[str]:
    """Dotted paths of every non-dict value in data."""
    keys = []
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            keys.extend(_leaf_keys(value, path))
        else:
            keys.append(path)
    return keys


def _read_file(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    with open(path, 'r', encoding='utf-8') as f:
        if suffix in YAML_SUFFIXES:
            return yaml.safe_load(f) or {}
        if suffix == '.json':
            return json.load(f)
    raise ConfigurationError(f"Unsupported config format: {path.suffix}")


def _write_file(path: Path, data: Dict[str, Any]) -> None:
    suffix = path.suffix.lower()
    if suffix not in YAML_SUFFIXES and suffix != '.json':
        raise ConfigurationError(f"Unsupported config format: {path.suffix}")

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        if suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            yaml.safe_dump(data, f, default_flow_style=False)


# =============================================================================
# CONFIG MANAGER
# =============================================================================

class ConfigManager:
    """
    Singleton holding the layered configuration tree.

    Reads and writes of the tree are serialized by the class lock, so
    threads may share the instance.

    Attributes:
        _config: Merged configuration tree
        _sources: Dotted key -> where its value was last set
        _loaded_files: Files merged so far, in order
        _environment: Name from PULSEDSP_ENV (default 'development')
    """

    _instance: Optional['ConfigManager'] = None
    _lock = threading.RLock()

    def __new__(cls) -> 'ConfigManager':
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._config = deepcopy(DEFAULTS)
                instance._sources = {}
                instance._loaded_files = []
                instance._environment = os.getenv('PULSEDSP_ENV', 'development')
                cls._instance = instance
                logger.debug(f"ConfigManager initialized (env: {instance._environment})")
        return cls._instance

    @classmethod
    def get_instance(cls) -> 'ConfigManager':
        return cls()

    @classmethod
    def reset(cls) -> None:
        """Discard the singleton; the next access starts from DEFAULTS again."""
        with cls._lock:
            cls._instance = None
        logger.debug("ConfigManager reset")

    # =========================================================================
    # FILES
    # =========================================================================

    def load(self, path: Union[str, Path], merge: bool = True) -> 'ConfigManager':
        """
        Read a YAML or JSON file into the configuration.

        Args:
            path: File to read
            merge: Merge into the current tree (True) or replace it (False)

        Returns:
            Self for chaining

        Raises:
            ConfigNotFoundError: If the file does not exist
            ConfigurationError: If the suffix is not .yaml/.yml/.json
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigNotFoundError(str(path))

        data = _read_file(path)
        with self._lock:
            if not merge:
                self._config = {}
                self._sources = {}

            deep_merge(self._config, data)
            for key in _leaf_keys(data):
                self._sources[key] = str(path)

            self._loaded_files.append(str(path))
        logger.info(f"Loaded configuration from {path}")
        return self

    def save(self,
             path: Union[str, Path],
             sections: Optional[List[str]] = None) -> None:
        """
        Write the configuration (or only the named sections) to a file.

        Raises:
            ConfigurationError: If the suffix is not .yaml/.yml/.json
        """
        if sections:
            data = {section: self.get_section(section) for section in sections}
        else:
            data = self.export()

        _write_file(Path(path), data)
        logger.info(f"Saved configuration to {path}")

    # =========================================================================
    # READING
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key such as 'quality.thresholds.min_snr_db'.

        Returns default when any path component is missing.
        """
        with self._lock:
            node: Any = self._config
            for part in key.split('.'):
                if not isinstance(node, dict) or part not in node:
                    return default
                node = node[part]
            return node

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key)
        return default if value is None else int(value)

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get(key)
        return default if value is None else float(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, str):
            return value.strip().lower() in ('true', 'yes', 'on', '1')
        return bool(value)

    def get_section(self, key: str) -> Dict[str, Any]:
        """Deep copy of a sub-tree ({} if absent or not a dict)."""
        with self._lock:
            value = self.get(key)
            return deepcopy(value) if isinstance(value, dict) else {}

    def get_source(self, key: str) -> str:
        """File path or 'runtime' that last set key; 'default' otherwise."""
        return self._sources.get(key, 'default')

    def export(self) -> Dict[str, Any]:
        with self._lock:
            return deepcopy(self._config)

    # =========================================================================
    # WRITING
    # =========================================================================

    def set(self, key: str, value: Any, source: str = 'runtime') -> 'ConfigManager':
        """
        Assign a dotted key, creating intermediate sections as needed.

        Example:
            >>> config.set('quality.motion_method', 'abrupt_change_rate')
        """
        *parents, leaf = key.split('.')
        with self._lock:
            node = self._config
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = value
            self._sources[key] = source

        logger.debug(f"Set {key} = {value}")
        return self

    def update(self, values: Dict[str, Any], source: str = 'runtime') -> 'ConfigManager':
        """set() for each dotted key in values, applied as one change."""
        with self._lock:
            for key, value in values.items():
                self.set(key, value, source)
        return self

    # =========================================================================
    # CHECKS AND ENVIRONMENT
    # =========================================================================

    def validate(self) -> List[str]:
        """
        Check the tree for missing or inconsistent values.

        Returns:
            Error messages; empty when the configuration is usable
        """
        errors = [
            f"Missing required configuration: {key}"
            for key in REQUIRED_KEYS if self.get(key) is None
        ]

        low = self.get('processing.bandpass.low_freq')
        high = self.get('processing.bandpass.high_freq')
        if low is not None and high is not None and not 0 < low < high:
            errors.append(f"Bandpass must satisfy 0 < low < high, got {low}-{high}")

        for key, allowed in CHOICES.items():
            value = self.get(key)
            if value not in allowed:
                options = ' or '.join(f"'{option}'" for option in allowed)
                errors.append(f"{key} must be {options}, got {value}")

        return errors

    def get_environment(self) -> str:
        return self._environment

    def set_environment(self, env: str) -> 'ConfigManager':
        """Switch environment and merge configs/<env>.yaml if it exists."""
        self._environment = env
        env_file = Path('configs') / f"{env}.yaml"
        if env_file.is_file():
            self.load(env_file)
        return self

    def summary(self) -> str:
        """Readable overview of loaded files and the selected methods."""
        lines = [
            "Configuration Summary",
            "=" * 40,
            f"Environment: {self._environment}",
            f"Loaded files: {len(self._loaded_files)}",
        ]
        lines.extend(f"  - {name}" for name in self._loaded_files)
        lines.append("")
        lines.append("Key Settings:")
        lines.append(
            f"  - Bandpass: {self.get('processing.bandpass.low_freq')}-"
            f"{self.get('processing.bandpass.high_freq')} Hz, "
            f"order {self.get('processing.bandpass.filter_order')}"
        )
        for label, key in (('SNR', 'quality.snr_method'),
                           ('Clipping', 'quality.clipping_method'),
                           ('Motion', 'quality.motion_method'),
                           ('Spectral', 'spectral.method')):
            lines.append(f"  - {label} method: {self.get(key)}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ConfigManager(env='{self._environment}', files={len(self._loaded_files)})"

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


# =============================================================================
# MODULE-LEVEL HELPERS
# =============================================================================

def get_config() -> ConfigManager:
    """Return the shared ConfigManager."""
    return ConfigManager.get_instance()


def load_config(path: Union[str, Path]) -> ConfigManager:
    """Merge a configuration file into the shared ConfigManager."""
    return get_config().load(path)


def resolve_settings(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Snapshot the shared configuration with per-instance overrides applied.

    The returned dict is a deep copy: later set() calls on the singleton do
    not reach it, and the overrides never reach the singleton.

    Args:
        overrides: Nested dict shaped like DEFAULTS

    Returns:
        Merged configuration dict
    """
    settings = get_config().export()
    if overrides:
        deep_merge(settings, overrides)
    return settings
