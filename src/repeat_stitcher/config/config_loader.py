"""
Configuration loader for the repeat stitcher.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default_config.yaml"

# Environment variables consulted after the file is read.
ENV_INPUT = "REPEAT_STITCHER_INPUT"
ENV_WORKERS = "REPEAT_STITCHER_WORKERS"


def merge_config(base: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Recursively merge `overrides` into a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_environment(config: Dict[str, Any], environ=None) -> Dict[str, Any]:
    environ = os.environ if environ is None else environ
    if environ.get(ENV_INPUT):
        config.setdefault('io', {})['input_gff'] = environ[ENV_INPUT]
    if environ.get(ENV_WORKERS):
        config.setdefault('performance', {})['num_workers'] = environ[ENV_WORKERS]
    return config


def load_config(config_path: Optional[str] = None, environ=None) -> Dict[str, Any]:
    """
    Load configuration from YAML file. Fails if file does not exist.

    Values from the packaged defaults fill anything the file leaves out.
    """
    with open(DEFAULT_CONFIG_PATH, 'r') as f:
        config = yaml.safe_load(f)

    if config_path is not None:
        config_path = Path(config_path)
        with open(config_path, 'r') as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"Invalid YAML format in {config_path}")
        config = merge_config(config, user_config)
        config['_source'] = str(config_path.resolve())
    else:
        config['_source'] = str(DEFAULT_CONFIG_PATH)

    return apply_environment(config, environ)


def parse_num_workers(num_workers_spec) -> int:
    """Parse num_workers specification. 0 means the same as 'auto'."""
    if isinstance(num_workers_spec, str):
        num_workers_spec = num_workers_spec.strip()
    if isinstance(num_workers_spec, bool):
        return 1
    elif num_workers_spec in (None, 'auto', 0, '0'):
        return max(1, os.cpu_count() or 1)
    elif isinstance(num_workers_spec, str) and num_workers_spec.isdigit():
        return max(1, int(num_workers_spec))
    elif isinstance(num_workers_spec, int):
        return max(1, num_workers_spec)
    else:
        return 1


class ConfigLoader:
    """Loads and manages configuration from YAML files."""

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        self.config_path = config_path
        self.config = merge_config(load_config(config_path), overrides)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'ConfigLoader':
        """Wrap an already loaded configuration dictionary."""
        loader = cls.__new__(cls)
        loader.config_path = config.get('_source')
        loader.config = config
        return loader

    def get_io_params(self) -> Dict[str, Any]:
        return self.config.get('io', {})

    def get_stitching_params(self) -> Dict[str, Any]:
        """Get separation, span and cost model parameters."""
        return self.config.get('stitching', {})

    def get_performance_params(self) -> Dict[str, Any]:
        return self.config.get('performance', {})

    def get_debug_params(self) -> Dict[str, Any]:
        return self.config.get('debug', {})

    def get_num_workers(self) -> int:
        """Resolved worker count, 1 when multiprocessing is disabled."""
        performance = self.get_performance_params()
        if not performance.get('use_multiprocessing', True):
            return 1
        return parse_num_workers(performance.get('num_workers', 'auto'))


_config_loader: Optional[ConfigLoader] = None


def get_config() -> ConfigLoader:
    """Get the global config loader instance."""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def reload_config(config_path: Optional[str] = None) -> ConfigLoader:
    """Reload configuration from file."""
    global _config_loader
    _config_loader = ConfigLoader(config_path)
    return _config_loader


__all__ = [
    'ConfigLoader',
    'DEFAULT_CONFIG_PATH',
    'ENV_INPUT',
    'ENV_WORKERS',
    'load_config',
    'merge_config',
    'apply_environment',
    'parse_num_workers',
    'get_config',
    'reload_config',
]
