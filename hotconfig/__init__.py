"""
설정 관리 모듈

ConfigStore, ConfigWatcher를 통해 설정 파일을 로드하고 핫 리로드를 지원합니다.
"""

from .loader import open_from_settings, read_config_file
from .settings import SettingsError, WatchSettings
from .store import ChangeHandler, ConfigStore
from .watcher import ConfigWatcher, WatchStats

__all__ = [
    "ChangeHandler",
    "ConfigStore",
    "ConfigWatcher",
    "SettingsError",
    "WatchSettings",
    "WatchStats",
    "open_from_settings",
    "read_config_file",
]
