"""
설정 로더

secrets.yaml + 환경 변수로 원격 스토어(Supabase) 접속 설정 생성.

우선순위: 환경 변수 > secrets.yaml의 현재 mode 섹션.
- SUPABASE_URL
- SUPABASE_SERVICE_ROLE_KEY
- CASHDESK_RESTAURANT_ID
- SLACK_WEBHOOK_URL
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from core.constants import Defaults, Paths
from core.types import RunMode


ENV_OVERRIDES: dict[str, str] = {
    "supabase_url": "SUPABASE_URL",
    "supabase_key": "SUPABASE_SERVICE_ROLE_KEY",
    "restaurant_id": "CASHDESK_RESTAURANT_ID",
}
ENV_SLACK_WEBHOOK = "SLACK_WEBHOOK_URL"


@dataclass(frozen=True)
class Secrets:
    """보안 설정 (secrets.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    mode: RunMode
    supabase_url: str
    supabase_key: str
    restaurant_id: str
    slack_webhook_url: str | None = None
    slack_channel: str | None = None
    store_schema: str = Defaults.STORE_SCHEMA
    request_timeout: float = Defaults.REQUEST_TIMEOUT_SEC


@dataclass(frozen=True)
class StoreConfig:
    """원격 스토어 접속 설정 (PostgREST 엔드포인트, API 키, 기본 레스토랑)"""

    rest_url: str
    api_key: str
    restaurant_id: str
    schema: str = Defaults.STORE_SCHEMA
    timeout: float = Defaults.REQUEST_TIMEOUT_SEC


class SecretsLoadError(Exception):
    """Secrets 로드 실패 예외"""

    pass


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise SecretsLoadError(f"secrets.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SecretsLoadError(f"secrets.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SecretsLoadError("secrets.yaml이 비어 있습니다")
    if not isinstance(data, dict):
        raise SecretsLoadError("secrets.yaml 최상위는 매핑이어야 합니다")
    return data


def _parse_mode(value: Any) -> RunMode:
    if value is None:
        raise SecretsLoadError("secrets.yaml에 'mode' 필드가 없습니다")
    try:
        return RunMode(value)
    except ValueError as e:
        valid_modes = [m.value for m in RunMode]
        raise ValueError(
            f"유효하지 않은 mode입니다: '{value}'. 유효한 값: {valid_modes}"
        ) from e


def _resolve(
    section: Mapping[str, Any],
    key: str,
    section_name: str,
    env: Mapping[str, str],
) -> str:
    """필수 값 조회 (환경 변수 우선)"""
    value = env.get(ENV_OVERRIDES[key]) or section.get(key)
    if not value:
        raise SecretsLoadError(
            f"secrets.yaml의 {section_name} 섹션에 '{key}'가 없습니다"
        )
    return str(value)


def _parse_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise SecretsLoadError(f"store.timeout이 숫자가 아닙니다: {value!r}") from e
    if timeout <= 0:
        raise SecretsLoadError(f"store.timeout은 0보다 커야 합니다: {timeout}")
    return timeout


def load_secrets(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Secrets:
    """secrets.yaml 파일 로드

    Args:
        path: secrets.yaml 경로 (None이면 기본 경로 사용)
        env: 환경 변수 (None이면 os.environ)

    Returns:
        Secrets 인스턴스

    Raises:
        SecretsLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 mode인 경우
    """
    env = os.environ if env is None else env
    data = _read_yaml(path or Paths.SECRETS_FILE)
    mode = _parse_mode(data.get("mode"))

    mode_config = data.get(mode.value)
    if mode_config is None:
        raise SecretsLoadError(f"secrets.yaml에 '{mode.value}' 설정이 없습니다")

    # slack, store 섹션은 선택 사항
    slack_config = data.get("slack") or {}
    store_config = data.get("store") or {}

    return Secrets(
        mode=mode,
        supabase_url=_resolve(mode_config, "supabase_url", mode.value, env),
        supabase_key=_resolve(mode_config, "supabase_key", mode.value, env),
        restaurant_id=_resolve(mode_config, "restaurant_id", mode.value, env),
        slack_webhook_url=env.get(ENV_SLACK_WEBHOOK) or slack_config.get("webhook_url") or None,
        slack_channel=slack_config.get("channel") or None,
        store_schema=store_config.get("schema") or Defaults.STORE_SCHEMA,
        request_timeout=_parse_timeout(
            store_config.get("timeout", Defaults.REQUEST_TIMEOUT_SEC)
        ),
    )


def get_store_config(secrets: Secrets) -> StoreConfig:
    """원격 스토어 접속 설정 반환 ({supabase_url}/rest/v1)"""
    return StoreConfig(
        rest_url=f"{secrets.supabase_url.rstrip('/')}/rest/v1",
        api_key=secrets.supabase_key,
        restaurant_id=secrets.restaurant_id,
        schema=secrets.store_schema,
        timeout=secrets.request_timeout,
    )


class Settings:
    """애플리케이션 설정 (싱글턴)

    최초 생성 시 secrets.yaml을 로드. 이후 호출의 경로 인자는 무시됨.
    """

    _instance: "Settings | None" = None
    _secrets: Secrets | None = None

    def __new__(cls, secrets_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, secrets_path: Path | None = None) -> None:
        if self._secrets is None:
            self._secrets = load_secrets(secrets_path)

    @property
    def secrets(self) -> Secrets:
        assert self._secrets is not None
        return self._secrets

    @property
    def mode(self) -> RunMode:
        return self.secrets.mode

    @property
    def restaurant_id(self) -> str:
        """기본 레스토랑 ID"""
        return self.secrets.restaurant_id

    @property
    def store_config(self) -> StoreConfig:
        return get_store_config(self.secrets)

    @property
    def slack_webhook_url(self) -> str | None:
        """Slack Webhook URL (미설정 시 None)"""
        return self.secrets.slack_webhook_url

    @property
    def slack_channel(self) -> str | None:
        return self.secrets.slack_channel

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._secrets = None


def get_settings(secrets_path: Path | None = None) -> Settings:
    """Settings 싱글턴 반환"""
    return Settings(secrets_path)
