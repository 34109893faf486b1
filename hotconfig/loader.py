"""
설정 파일 로드 진입점

로드와 감시 시작을 한 번에 처리합니다.
"""

import logging
from pathlib import Path

from pydantic import BaseModel

from lib.codec import DocumentCodec, codec_for_path

from .settings import WatchSettings
from .store import ConfigStore
from .watcher import DEFAULT_DEBOUNCE_SECONDS, DEFAULT_HEALTH_CHECK_SECONDS, ConfigWatcher


def read_config_file(
    path: str | Path,
    monitor: bool = False,
    *,
    schema: type[BaseModel] | None = None,
    codec: DocumentCodec | None = None,
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    health_check_seconds: float = DEFAULT_HEALTH_CHECK_SECONDS,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> tuple[ConfigStore, ConfigWatcher | None]:
    """설정 파일 로드 (선택적으로 감시 시작)

    Args:
        path: 설정 파일 경로
        monitor: True면 변경 감시 시작 (실행 중인 이벤트 루프 필요)
        schema: 문서를 검증할 pydantic 모델
        codec: 문서 코덱 (None이면 확장자로 선택)
        debounce_seconds: 디바운스 시간 (초)
        health_check_seconds: Observer 생존 확인 주기 (초)
        logger: 주입 로거

    Returns:
        (ConfigStore, ConfigWatcher 또는 None)

    Raises:
        ConfigNotFoundError, ConfigIOError, ConfigDecodeError: 초기 로드 실패
        SubscriptionError: 감시 등록 실패
    """
    store = ConfigStore.load(path, schema=schema, codec=codec, logger=logger)

    if not monitor:
        return store, None

    watcher = ConfigWatcher(
        store,
        debounce_seconds=debounce_seconds,
        health_check_seconds=health_check_seconds,
        logger=logger,
    )
    watcher.start()
    return store, watcher


def open_from_settings(
    settings: WatchSettings,
    schema: type[BaseModel] | None = None,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> tuple[ConfigStore, ConfigWatcher | None]:
    """WatchSettings 기반 로드"""
    return read_config_file(
        settings.config_path,
        monitor=settings.watch,
        schema=schema,
        codec=codec_for_path(settings.config_path, settings.substitute_env),
        debounce_seconds=settings.debounce_seconds,
        health_check_seconds=settings.health_check_seconds,
        logger=logger,
    )
