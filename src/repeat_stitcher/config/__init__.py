from .config_loader import ConfigLoader, load_config, parse_num_workers, get_config, reload_config

__all__ = [
    'ConfigLoader',
    'load_config',
    'parse_num_workers',
    'get_config',
    'reload_config',
]
