"""
에러 분류 시스템

설정 로드/리로드 과정의 실패를 단계별로 분류하여 로깅과 예외 처리에 활용.
초기 로드 에러는 호출자에게 전파하고, 리로드 경로의 에러는 로그만 남깁니다.
"""

from enum import Enum

import yaml


class ErrorCategory(str, Enum):
    """에러 카테고리"""

    NOT_FOUND = "not_found"  # 로드 시점에 파일 없음
    IO = "io"  # 읽기 실패
    DECODE = "decode"  # 문서 형식 오류
    SUBSCRIPTION = "subscription"  # 파일 감시 백엔드 오류
    HANDLER = "handler"  # 변경 핸들러 실행 실패
    UNKNOWN = "unknown"


class ConfigError(Exception):
    """설정 기본 에러"""

    category = ErrorCategory.UNKNOWN

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class ConfigNotFoundError(ConfigError):
    """설정 파일이 존재하지 않음"""

    category = ErrorCategory.NOT_FOUND


class ConfigIOError(ConfigError):
    """설정 파일 읽기 실패"""

    category = ErrorCategory.IO


class ConfigDecodeError(ConfigError):
    """설정 문서 디코딩 실패"""

    category = ErrorCategory.DECODE


class SubscriptionError(ConfigError):
    """파일 시스템 감시 실패"""

    category = ErrorCategory.SUBSCRIPTION


class HandlerError(ConfigError):
    """변경 핸들러 실행 실패

    원본 예외는 ``__cause__``로 연결됩니다.
    """

    category = ErrorCategory.HANDLER

    def __init__(self, message: str, handler_name: str, path: str | None = None):
        super().__init__(message, path=path)
        self.handler_name = handler_name


class ErrorClassifier:
    """에러 분류기"""

    LABELS = {
        ErrorCategory.NOT_FOUND: "[파일 없음]",
        ErrorCategory.IO: "[읽기 실패]",
        ErrorCategory.DECODE: "[형식 오류]",
        ErrorCategory.SUBSCRIPTION: "[감시 오류]",
        ErrorCategory.HANDLER: "[핸들러 오류]",
        ErrorCategory.UNKNOWN: "[분류되지 않음]",
    }

    @classmethod
    def classify(cls, error: BaseException) -> ErrorCategory:
        """에러를 분류하여 카테고리 반환

        Args:
            error: 분류할 예외 객체

        Returns:
            ErrorCategory: 실패 단계에 따른 카테고리
        """
        if isinstance(error, ConfigError):
            return error.category

        # 순서 중요: FileNotFoundError는 OSError의 하위 클래스
        if isinstance(error, FileNotFoundError):
            return ErrorCategory.NOT_FOUND

        if isinstance(error, OSError):
            return ErrorCategory.IO

        # UnicodeDecodeError, json.JSONDecodeError, pydantic ValidationError 모두 ValueError
        if isinstance(error, (yaml.YAMLError, ValueError)):
            return ErrorCategory.DECODE

        return ErrorCategory.UNKNOWN

    @classmethod
    def format_message(
        cls, error: BaseException, include_traceback: bool = False
    ) -> str:
        """에러 메시지 포맷팅

        Args:
            error: 포맷팅할 예외 객체
            include_traceback: 상세 스택 트레이스 포함 여부

        Returns:
            str: 카테고리 라벨이 포함된 에러 메시지
        """
        category = cls.classify(error)
        message = f"{cls.LABELS[category]} {type(error).__name__}: {error}"

        cause = error.__cause__
        if cause is not None:
            message += f" (원인: {type(cause).__name__}: {cause})"

        if include_traceback:
            import traceback

            details = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
            message += f"\n\n상세 정보:\n{details}"

        return message
