"""
WatchSettings 및 로드 진입점 테스트
"""

import pytest

from hotconfig.loader import open_from_settings, read_config_file
from hotconfig.settings import SettingsError, WatchSettings
from lib.codec import JsonCodec
from lib.errors import ConfigNotFoundError

ENV_NAMES = [
    "HOTCONFIG_PATH",
    "HOTCONFIG_WATCH",
    "HOTCONFIG_DEBOUNCE_SECONDS",
    "HOTCONFIG_HEALTH_CHECK_SECONDS",
    "HOTCONFIG_SUBSTITUTE_ENV",
]


@pytest.fixture
def clean_env(monkeypatch):
    """HOTCONFIG_* 환경변수 제거 (테스트 후 복원)"""
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestWatchSettings:
    """환경변수 기반 설정 테스트"""

    def test_defaults(self, clean_env):
        """환경변수 없을 때 기본값"""
        settings = WatchSettings.from_env()

        assert settings.config_path == "config/config.yaml"
        assert settings.watch is False
        assert settings.debounce_seconds == 1.0
        assert settings.health_check_seconds == 5.0
        assert settings.substitute_env is False

    def test_from_env(self, clean_env):
        """환경변수 반영"""
        clean_env.setenv("HOTCONFIG_PATH", "/etc/app/config.yaml")
        clean_env.setenv("HOTCONFIG_WATCH", "true")
        clean_env.setenv("HOTCONFIG_DEBOUNCE_SECONDS", "0.25")
        clean_env.setenv("HOTCONFIG_SUBSTITUTE_ENV", "1")

        settings = WatchSettings.from_env()

        assert settings.config_path == "/etc/app/config.yaml"
        assert settings.watch is True
        assert settings.debounce_seconds == 0.25
        assert settings.substitute_env is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "off", "nope"])
    def test_bool_false_values(self, clean_env, value):
        """참 값 외에는 False"""
        clean_env.setenv("HOTCONFIG_WATCH", value)
        assert WatchSettings.from_env().watch is False

    def test_invalid_float(self, clean_env):
        """숫자가 아닌 디바운스 값"""
        clean_env.setenv("HOTCONFIG_DEBOUNCE_SECONDS", "soon")

        with pytest.raises(SettingsError):
            WatchSettings.from_env()

    def test_env_file(self, clean_env, tmp_path):
        """.env 파일 로드"""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "HOTCONFIG_PATH=/srv/config.yaml\nHOTCONFIG_WATCH=yes\n", encoding="utf-8"
        )

        settings = WatchSettings.from_env(env_file=env_file)

        assert settings.config_path == "/srv/config.yaml"
        assert settings.watch is True

    def test_env_file_does_not_override(self, clean_env, tmp_path):
        """기존 환경변수가 .env보다 우선"""
        clean_env.setenv("HOTCONFIG_PATH", "/from/env.yaml")
        env_file = tmp_path / ".env"
        env_file.write_text("HOTCONFIG_PATH=/from/file.yaml\n", encoding="utf-8")

        assert WatchSettings.from_env(env_file=env_file).config_path == "/from/env.yaml"

    def test_missing_env_file_ignored(self, clean_env, tmp_path):
        """없는 .env 파일은 무시"""
        settings = WatchSettings.from_env(env_file=tmp_path / "missing.env")
        assert settings.config_path == "config/config.yaml"


class TestWatchSettingsValidate:
    """설정값 검증 테스트"""

    def test_valid(self, config_path):
        """정상 설정"""
        settings = WatchSettings(config_path=str(config_path))
        assert settings.validate() == []

    def test_missing_file_warns(self, tmp_path, caplog):
        """설정 파일 없음은 경고"""
        settings = WatchSettings(config_path=str(tmp_path / "missing.yaml"))

        with caplog.at_level("WARNING"):
            messages = settings.validate()

        assert len(messages) == 1
        assert "설정 파일 없음" in caplog.text

    def test_negative_debounce_strict(self, config_path):
        """음수 디바운스는 오류"""
        settings = WatchSettings(config_path=str(config_path), debounce_seconds=-1)

        with pytest.raises(SettingsError) as exc_info:
            settings.validate(strict=True)

        assert "1개 오류" in str(exc_info.value)

    def test_errors_non_strict(self, config_path):
        """strict=False면 예외 없이 목록 반환"""
        settings = WatchSettings(
            config_path=str(config_path), debounce_seconds=-1, health_check_seconds=0
        )

        messages = settings.validate(strict=False)

        assert len(messages) == 2

    def test_empty_path(self):
        """경로 누락"""
        with pytest.raises(SettingsError):
            WatchSettings(config_path="").validate()

    def test_from_env_validated(self, clean_env, config_path):
        """로드 + 검증"""
        clean_env.setenv("HOTCONFIG_PATH", str(config_path))

        settings = WatchSettings.from_env_validated()

        assert settings.config_path == str(config_path)


class TestReadConfigFile:
    """로드 진입점 테스트"""

    def test_without_monitor(self, config_path, sample_config):
        """감시 없이 로드"""
        store, watcher = read_config_file(config_path)

        assert store.document == sample_config
        assert watcher is None

    def test_missing_file(self, tmp_path):
        """파일 없음은 호출자에게 전파"""
        with pytest.raises(ConfigNotFoundError):
            read_config_file(tmp_path / "missing.yaml", monitor=True)

    def test_open_from_settings(self, tmp_path, monkeypatch):
        """설정 기반 로드 (환경변수 치환 포함)"""
        monkeypatch.setenv("SCOREBOARD_URL", "https://scoreboard.example")
        path = tmp_path / "config.yaml"
        path.write_text("scoreboard: ${SCOREBOARD_URL}\n", encoding="utf-8")

        store, watcher = open_from_settings(
            WatchSettings(config_path=str(path), substitute_env=True)
        )

        assert store.get("scoreboard") == "https://scoreboard.example"
        assert watcher is None

    def test_open_from_settings_json(self, tmp_path):
        """JSON 설정 파일"""
        path = tmp_path / "config.json"
        path.write_text('{"a": 1}', encoding="utf-8")

        store, _ = open_from_settings(WatchSettings(config_path=str(path)))

        assert isinstance(store.codec, JsonCodec)
        assert store.get("a") == 1
