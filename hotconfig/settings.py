"""
핫 리로드 설정

환경변수 기반 설정 관리.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .watcher import DEFAULT_DEBOUNCE_SECONDS, DEFAULT_HEALTH_CHECK_SECONDS

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}


class SettingsError(Exception):
    """설정 오류 예외"""

    pass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as e:
        raise SettingsError(f"잘못된 {name} 값: {value!r}") from e


@dataclass
class WatchSettings:
    """설정 파일 로드/감시 설정"""

    config_path: str = "config/config.yaml"
    watch: bool = False

    # 감시 설정
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    health_check_seconds: float = DEFAULT_HEALTH_CHECK_SECONDS

    # ${VAR} 치환 (YAML 전용)
    substitute_env: bool = False

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "WatchSettings":
        """환경변수에서 설정 로드

        Args:
            env_file: 먼저 로드할 .env 파일 (있을 때만, 기존 환경변수 우선)
        """
        if env_file is not None and Path(env_file).exists():
            load_dotenv(env_file)

        return cls(
            config_path=os.getenv("HOTCONFIG_PATH", "config/config.yaml"),
            watch=_env_bool("HOTCONFIG_WATCH", False),
            debounce_seconds=_env_float(
                "HOTCONFIG_DEBOUNCE_SECONDS", DEFAULT_DEBOUNCE_SECONDS
            ),
            health_check_seconds=_env_float(
                "HOTCONFIG_HEALTH_CHECK_SECONDS", DEFAULT_HEALTH_CHECK_SECONDS
            ),
            substitute_env=_env_bool("HOTCONFIG_SUBSTITUTE_ENV", False),
        )

    def validate(self, strict: bool = True) -> list[str]:
        """설정값 검증

        Args:
            strict: True면 오류 시 예외 발생, False면 경고만

        Returns:
            list[str]: 검증 경고/오류 메시지 목록

        Raises:
            SettingsError: strict=True이고 오류가 있을 때
        """
        errors = []
        warnings = []

        if not self.config_path:
            errors.append("필수 환경변수 누락: HOTCONFIG_PATH")
        elif not Path(self.config_path).exists():
            warnings.append(f"설정 파일 없음: {self.config_path}")

        if self.debounce_seconds < 0:
            errors.append(f"디바운스 시간은 음수일 수 없음: {self.debounce_seconds}초")
        elif self.debounce_seconds > 60:
            warnings.append(f"디바운스 시간이 너무 김: {self.debounce_seconds}초")

        if self.health_check_seconds <= 0:
            errors.append(
                f"Observer 확인 주기는 0보다 커야 함: {self.health_check_seconds}초"
            )

        if self.substitute_env and Path(self.config_path).suffix.lower() == ".json":
            warnings.append("환경변수 치환은 YAML 파일에만 적용됨")

        # 경고 로깅
        for warning in warnings:
            logger.warning(f"[Settings] {warning}")

        # 오류 처리
        if errors:
            for error in errors:
                logger.error(f"[Settings] {error}")
            if strict:
                raise SettingsError(
                    f"설정 검증 실패: {len(errors)}개 오류\n" + "\n".join(errors)
                )

        return errors + warnings

    @classmethod
    def from_env_validated(
        cls, strict: bool = True, env_file: str | Path | None = None
    ) -> "WatchSettings":
        """환경변수에서 설정 로드 및 검증

        Raises:
            SettingsError: strict=True이고 오류가 있을 때
        """
        settings = cls.from_env(env_file=env_file)
        settings.validate(strict=strict)
        return settings
