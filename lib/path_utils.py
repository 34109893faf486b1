"""
감시 대상 경로 유틸리티

문제:
- 많은 에디터가 임시 파일 작성 후 rename으로 파일을 교체
- 일부 감시 백엔드는 이 경우 디렉토리 단위로만 이벤트를 보고

해결:
- 파일이 아닌 상위 디렉토리를 감시
- 이벤트 경로를 (디렉토리 + 파일명)과 비교하여 형제 파일 이벤트 제외
"""

import os
from pathlib import Path
from typing import Any, NamedTuple


def normalize_path(path: str | bytes | os.PathLike) -> str:
    """비교용 경로 정규화 (절대 경로, 대소문자 규칙 반영)"""
    return os.path.normcase(os.path.abspath(os.fsdecode(path)))


class WatchTarget(NamedTuple):
    """감시 대상 (디렉토리 + 파일명)"""

    directory: str
    name: str

    @classmethod
    def from_path(cls, path: str | Path) -> "WatchTarget":
        """파일 경로 → 감시 대상

        Examples:
            >>> WatchTarget.from_path("config.yaml").directory
            '.'
        """
        directory, name = os.path.split(os.fspath(path))
        # 파일명만 주어진 경우 현재 디렉토리
        return cls(directory or ".", name)

    @property
    def path(self) -> str:
        """디렉토리와 파일명으로 재구성한 전체 경로"""
        return os.path.join(self.directory, self.name)

    def matches(self, candidate: str | bytes | os.PathLike | None) -> bool:
        """이벤트 경로가 감시 파일과 같은지 확인"""
        if not candidate:
            return False
        return normalize_path(candidate) == normalize_path(self.path)

    def matches_event(self, event: Any) -> bool:
        """watchdog 이벤트가 감시 파일을 대상으로 하는지 확인

        rename으로 교체되는 경우 dest_path가 감시 파일이 됩니다.
        디렉토리 이벤트는 항상 제외합니다.
        """
        if getattr(event, "is_directory", False):
            return False
        return self.matches(event.src_path) or self.matches(
            getattr(event, "dest_path", None)
        )
