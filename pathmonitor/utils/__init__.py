# pathmonitor/utils/__init__.py

"""
pathmonitor utilities
"""
from .config import Config, MonitorConfig, WatchConfig, WatchTarget, load_config, save_config
from .logger import setup_logging, log_exception
from .file_utils import normalize_path, is_descendant, iter_subdirectories

__all__ = [
    'Config', 'MonitorConfig', 'WatchConfig', 'WatchTarget', 'load_config', 'save_config',
    'setup_logging', 'log_exception',
    'normalize_path', 'is_descendant', 'iter_subdirectories',
]
