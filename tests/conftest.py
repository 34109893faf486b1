"""
Pytest 설정 및 공통 Fixture
"""

from pathlib import Path
from typing import Any

import pytest

from hotconfig.store import ConfigStore


@pytest.fixture
def sample_config() -> dict[str, Any]:
    """샘플 설정 (기본)"""
    from tests.sample_data import generate_sample_config
    return generate_sample_config("basic")


@pytest.fixture
def changed_config() -> dict[str, Any]:
    """샘플 설정 (변경됨)"""
    from tests.sample_data import generate_sample_config
    return generate_sample_config("changed")


@pytest.fixture
def config_path(tmp_path: Path, sample_config: dict[str, Any]) -> Path:
    """샘플 설정이 기록된 YAML 파일 경로"""
    from tests.sample_data import write_yaml

    path = tmp_path / "config.yaml"
    write_yaml(path, sample_config)
    return path


@pytest.fixture
def store(config_path: Path) -> ConfigStore:
    """샘플 설정을 로드한 ConfigStore"""
    return ConfigStore.load(config_path)


@pytest.fixture
def observer_factory():
    """FakeObserver 생성 함수

    생성된 Observer는 factory.observers에 순서대로 기록됩니다.
    """
    from tests.sample_data import FakeObserver

    observers: list[FakeObserver] = []

    def factory() -> FakeObserver:
        observer = FakeObserver()
        observers.append(observer)
        return observer

    factory.observers = observers
    return factory

