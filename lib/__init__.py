"""
hotconfig 공통 라이브러리

문서 코덱, 에러 분류, 감시 대상 경로 유틸리티 제공.
"""

from .codec import (
    DocumentCodec,
    JsonCodec,
    YamlCodec,
    codec_for_path,
    substitute_env_vars,
)
from .errors import (
    ConfigDecodeError,
    ConfigError,
    ConfigIOError,
    ConfigNotFoundError,
    ErrorCategory,
    ErrorClassifier,
    HandlerError,
    SubscriptionError,
)
from .path_utils import WatchTarget, normalize_path

__all__ = [
    # Codec
    "DocumentCodec",
    "JsonCodec",
    "YamlCodec",
    "codec_for_path",
    "substitute_env_vars",
    # Errors
    "ConfigDecodeError",
    "ConfigError",
    "ConfigIOError",
    "ConfigNotFoundError",
    "ErrorCategory",
    "ErrorClassifier",
    "HandlerError",
    "SubscriptionError",
    # Path Utils
    "WatchTarget",
    "normalize_path",
]
