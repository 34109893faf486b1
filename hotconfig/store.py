"""
설정 저장소

설정 파일 하나를 디코딩하여 보관하고 변경 핸들러 목록을 관리합니다.

설계 원칙:
- 문서는 통째로 교체 (부분 갱신 없음)
- 교체는 ConfigWatcher만 수행
- 핸들러 목록은 추가만 가능, 순서 = 호출 순서

사용법:
    ```python
    store = ConfigStore.load("config/app.yaml")
    store.register_handler(lambda s: print(s.document))

    timeout = store.get("timeout", 30)
    ```
"""

import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Awaitable, Callable, Union

from pydantic import BaseModel, ValidationError

from lib.codec import DocumentCodec, codec_for_path
from lib.errors import ConfigDecodeError, ConfigIOError, ConfigNotFoundError


ChangeHandler = Callable[["ConfigStore"], Union[None, Awaitable[None]]]


def read_file(path: Path) -> bytes:
    """파일 전체 바이트 읽기"""
    try:
        return path.read_bytes()
    except OSError as e:
        raise ConfigIOError(f"설정 파일 읽기 실패: {e}", path=str(path)) from e


def decode_document(
    data: bytes,
    codec: DocumentCodec,
    schema: type[BaseModel] | None = None,
    path: str | None = None,
) -> Any:
    """바이트 → 문서

    schema가 없으면 최상위가 매핑인 문서만 허용합니다.

    Raises:
        ConfigDecodeError: 형식 오류, 스키마 불일치
    """
    try:
        document = codec.decode(data)
    except Exception as e:
        # 코덱 종류와 무관하게 (RecursionError 등 포함) 형식 오류로 통일
        raise ConfigDecodeError(f"{codec.name} 파싱 실패: {e}", path=path) from e

    if schema is None:
        if not isinstance(document, Mapping):
            raise ConfigDecodeError(
                f"최상위 요소는 매핑이어야 합니다: {type(document).__name__}",
                path=path,
            )
        return document

    try:
        return schema.model_validate(document)
    except ValidationError as e:
        raise ConfigDecodeError(f"스키마 검증 실패: {e}", path=path) from e


class ConfigStore:
    """설정 저장소

    현재 문서와 변경 핸들러 목록을 보관합니다.
    어느 스레드에서든 document를 읽을 수 있으며,
    교체 중인 짧은 구간 외에는 대기하지 않습니다.
    """

    def __init__(
        self,
        path: str | Path,
        document: Any,
        codec: DocumentCodec | None = None,
        schema: type[BaseModel] | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        """
        Args:
            path: 설정 파일 경로
            document: 디코딩된 초기 문서
            codec: 문서 코덱 (None이면 확장자로 선택)
            schema: pydantic 모델 (None이면 dict 문서)
            logger: 주입 로거 (None이면 모듈 로거)
        """
        self.path = Path(path)
        self.codec = codec or codec_for_path(self.path)
        self.schema = schema
        self.logger = logger or logging.getLogger(__name__)

        self._document = document
        self._handlers: list[ChangeHandler] = []
        self._lock = threading.Lock()
        self._version = 0

    @classmethod
    def load(
        cls,
        path: str | Path,
        schema: type[BaseModel] | None = None,
        codec: DocumentCodec | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> "ConfigStore":
        """설정 파일 로드

        Args:
            path: 설정 파일 경로
            schema: 문서를 검증할 pydantic 모델
            codec: 문서 코덱
            logger: 주입 로거

        Returns:
            ConfigStore: 초기 문서를 보관한 저장소 (핸들러 없음)

        Raises:
            ConfigNotFoundError: 파일 없음
            ConfigIOError: 읽기 실패
            ConfigDecodeError: 형식 오류
        """
        path = Path(path)
        log = logger or logging.getLogger(__name__)

        # 존재 여부는 읽기 실패로 추론하지 않고 먼저 확인
        if not path.exists():
            raise ConfigNotFoundError(
                f"설정 파일이 존재하지 않습니다: {path}", path=str(path)
            )

        log.info(f"[ConfigStore] 설정 파싱 시작: path={path}")

        codec = codec or codec_for_path(path)
        document = decode_document(read_file(path), codec, schema, path=str(path))
        return cls(path, document, codec=codec, schema=schema, logger=logger)

    @property
    def document(self) -> Any:
        """현재 문서"""
        with self._lock:
            return self._document

    @property
    def version(self) -> int:
        """교체 횟수 (초기 로드 = 0)"""
        return self._version

    @property
    def handlers(self) -> tuple[ChangeHandler, ...]:
        """핸들러 목록 스냅샷"""
        with self._lock:
            return tuple(self._handlers)

    def get(self, key: str, default: Any = None) -> Any:
        """최상위 키 조회 (dict 키 또는 모델 속성)"""
        document = self.document
        if isinstance(document, Mapping):
            return document.get(key, default)
        return getattr(document, key, default)

    def register_handler(self, handler: ChangeHandler) -> None:
        """변경 핸들러 등록

        감시 시작 전후 어느 때나 호출 가능합니다.
        진행 중인 알림 사이클에는 포함되지 않고 다음 사이클부터 호출됩니다.
        """
        with self._lock:
            self._handlers.append(handler)

    def read_document(self) -> Any:
        """현재 파일 내용을 새 문서로 디코딩 (보관 중인 문서는 변경하지 않음)

        Raises:
            ConfigIOError: 읽기 실패 (삭제된 경우 포함)
            ConfigDecodeError: 형식 오류
        """
        return decode_document(
            read_file(self.path), self.codec, self.schema, path=str(self.path)
        )

    def encode(self, document: Any = None) -> bytes:
        """비교용 정규 인코딩 (기본값: 현재 문서)"""
        if document is None:
            document = self.document
        return self.codec.encode(document)

    def _swap(self, document: Any) -> Any:
        """문서 교체 (ConfigWatcher 전용)

        Returns:
            이전 문서
        """
        with self._lock:
            previous = self._document
            self._document = document
            self._version += 1
        return previous
