# pathmonitor/utils/config.py

"""
Configuration management for pathmonitor
"""
import os
import sys
import json
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field, asdict, fields
import logging

from ..watch.errors import InvalidConfiguration, require_concurrency
from ..watch.events import EventType
from ..watch.patterns import DEFAULT_IGNORE_PATTERNS

logger = logging.getLogger(__name__)


@dataclass
class MonitorConfig:
    """Monitoring coordinator configuration"""
    callback_concurrency: int = 4
    allow_duplicate_callbacks: bool = True
    event_types: list = field(default_factory=lambda: [
        event_type.value for event_type in EventType
    ])


@dataclass
class WatchConfig:
    """Watch source configuration"""
    enabled: bool = True
    use_polling: bool = False
    poll_interval: float = 1.0  # seconds
    ignore_patterns: list = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))


@dataclass
class WatchTarget:
    """A path the runner registers a logging callback for"""
    path: Path = Path(".")
    events: list = field(default_factory=lambda: ["created", "modified", "deleted"])
    recursive: bool = False

    def __post_init__(self):
        if isinstance(self.path, str):
            self.path = Path(self.path)


@dataclass
class Config:
    """Main configuration class"""
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)
    targets: List[WatchTarget] = field(default_factory=list)

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "text"  # text, json, or color

    def validate(self) -> "Config":
        """
        Check values the monitor cannot run with

        Raises:
            InvalidConfiguration: On a bad concurrency or event name
        """
        require_concurrency(self.monitor.callback_concurrency)

        names = list(self.monitor.event_types)
        for target in self.targets:
            names.extend(target.events)
        for name in names:
            try:
                EventType.parse(name)
            except ValueError as e:
                raise InvalidConfiguration(str(e)) from None

        return self

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Config":
        """Build config from a parsed YAML/JSON mapping; unknown keys are ignored"""
        data = data or {}
        config = cls()

        sections = {'monitor': MonitorConfig, 'watch': WatchConfig}
        for key, value in data.items():
            if key in sections:
                if not isinstance(value, dict):
                    raise InvalidConfiguration(f"Section '{key}' must be a mapping")
                setattr(config, key, _build(sections[key], value))
            elif key == 'targets':
                config.targets = [_build(WatchTarget, item) for item in value or []]
            elif key in ('log_level', 'log_file', 'log_format'):
                setattr(config, key, value)
            else:
                logger.warning(f"Ignoring unknown configuration key: {key}")

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        def serialize(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: serialize(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [serialize(v) for v in obj]
            return obj

        return serialize(asdict(self))

    def to_json(self, indent: int = 2) -> str:
        """Convert config to JSON string"""
        return json.dumps(self.to_dict(), indent=indent)

    def to_yaml(self) -> str:
        """Convert config to YAML string"""
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def save(self, path: Union[str, Path]):
        """Save config to file"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix.lower() in ['.yaml', '.yml']:
            path.write_text(self.to_yaml(), encoding='utf-8')
        else:  # default to JSON
            path.write_text(self.to_json(), encoding='utf-8')

        logger.info(f"Configuration saved to {path}")


def _build(cls, data: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return cls(**{k: v for k, v in data.items() if k in known})


def get_default_config_path() -> Path:
    """Get default configuration path based on platform"""
    if sys.platform == "win32":
        appdata = Path(os.environ.get('APPDATA', Path.home()))
        return appdata / "pathmonitor" / "config.yaml"
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "pathmonitor" / "config.yaml"
    else:  # linux
        config_home = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / ".config"))
        return config_home / "pathmonitor" / "config.yaml"


def _read_file(path: Path) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        if path.suffix.lower() in ['.yaml', '.yml']:
            return yaml.safe_load(f) or {}
        return json.load(f)


def load_config(path: Union[str, Path] = None) -> Config:
    """
    Load configuration from file, or defaults when none exists

    An explicitly given path must exist and parse; the default locations
    are only tried when no path is given.

    Args:
        path: Config file (.yaml/.yml or .json)

    Raises:
        FileNotFoundError: If path is given but missing
        InvalidConfiguration: If the file holds unusable values
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        logger.info(f"Loading configuration from {config_path}")
        return Config.from_dict(_read_file(config_path)).validate()

    for config_path in [Path("pathmonitor.yaml"), Path("pathmonitor.json"), get_default_config_path()]:
        if config_path.exists():
            logger.info(f"Loading configuration from {config_path}")
            return Config.from_dict(_read_file(config_path)).validate()

    logger.info("No configuration file found, using defaults")
    return Config()


def save_config(config: Config, path: Union[str, Path] = None):
    """Save configuration to file"""
    config.save(path or get_default_config_path())
