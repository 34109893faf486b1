"""
설정 문서 코덱

바이트 ↔ 문서 변환을 담당합니다.

- decode: 파일 바이트 → 구조화된 문서 (dict)
- encode: 문서 → 정규화된 바이트 (변경 감지 비교 전용)

encode 결과는 키 정렬 등으로 결정적이어야 합니다.
같은 내용이면 항상 같은 바이트가 나와야 no-op 재저장을 변경으로 오인하지 않습니다.
"""

import json
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

# ${VAR_NAME} 또는 $VAR_NAME
ENV_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Z_][A-Z0-9_]*)")


def substitute_env_vars(value: Any) -> Any:
    """설정 값에서 환경변수 치환

    ${VAR_NAME} 또는 $VAR_NAME 형식을 환경변수 값으로 치환합니다.
    정의되지 않은 변수는 원문 그대로 둡니다.
    """
    if isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    if isinstance(value, str):

        def replace(match: re.Match) -> str:
            var_name = match.group(1) or match.group(2)
            return os.getenv(var_name, match.group(0))

        return ENV_PATTERN.sub(replace, value)
    return value


def to_plain(document: Any) -> Any:
    """비교용 평문 구조로 변환 (pydantic 모델 지원)"""
    if isinstance(document, BaseModel):
        return document.model_dump(mode="json")
    return document


class DocumentCodec:
    """문서 코덱 기본 클래스"""

    name = "base"

    def decode(self, data: bytes) -> Any:
        raise NotImplementedError

    def encode(self, document: Any) -> bytes:
        raise NotImplementedError


class YamlCodec(DocumentCodec):
    """YAML 코덱

    Args:
        substitute_env: True면 디코딩된 문자열 값의 환경변수를 치환
    """

    name = "yaml"

    def __init__(self, substitute_env: bool = False):
        self.substitute_env = substitute_env

    def decode(self, data: bytes) -> Any:
        # 빈 파일은 빈 문서
        document = yaml.safe_load(data.decode("utf-8"))
        if document is None:
            document = {}
        if self.substitute_env:
            document = substitute_env_vars(document)
        return document

    def encode(self, document: Any) -> bytes:
        text = yaml.safe_dump(
            to_plain(document),
            sort_keys=True,
            allow_unicode=True,
            default_flow_style=False,
        )
        return text.encode("utf-8")


class JsonCodec(DocumentCodec):
    """JSON 코덱"""

    name = "json"

    def decode(self, data: bytes) -> Any:
        if not data.strip():
            return {}
        return json.loads(data.decode("utf-8"))

    def encode(self, document: Any) -> bytes:
        text = json.dumps(
            to_plain(document),
            sort_keys=True,
            ensure_ascii=False,
            separators=(",", ":"),
        )
        return text.encode("utf-8")


def codec_for_path(path: str | Path, substitute_env: bool = False) -> DocumentCodec:
    """파일 확장자로 코덱 선택 (.json 외에는 YAML)"""
    if Path(path).suffix.lower() == ".json":
        return JsonCodec()
    return YamlCodec(substitute_env=substitute_env)
