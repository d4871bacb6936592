"""
pytest 공통 fixture 정의
"""

import tempfile
from pathlib import Path

import pytest

from core.config.loader import ENV_OVERRIDES, ENV_SLACK_WEBHOOK


@pytest.fixture(autouse=True)
def clear_store_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """실행 환경의 Supabase/Slack 환경 변수가 테스트 설정을 덮어쓰지 않도록 제거"""
    for name in [*ENV_OVERRIDES.values(), ENV_SLACK_WEBHOOK]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_secrets_file(temp_dir: Path) -> Path:
    """테스트용 secrets.yaml 파일 생성 (staging 모드)"""
    secrets_content = """# 테스트용 secrets.yaml
mode: staging

production:
  supabase_url: "https://prod.supabase.co"
  supabase_key: "prod_key_12345"
  restaurant_id: "rest-prod"

staging:
  supabase_url: "https://staging.supabase.co/"
  supabase_key: "staging_key_abcde"
  restaurant_id: "rest-staging"

slack:
  webhook_url: "https://hooks.slack.com/services/T000/B000/XXXX"
  channel: "#caixa"
"""
    secrets_path = temp_dir / "secrets.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture
def temp_secrets_file_production(temp_dir: Path) -> Path:
    """테스트용 secrets.yaml 파일 생성 (production 모드, Slack 없음)"""
    secrets_content = """mode: production

production:
  supabase_url: "https://prod.supabase.co"
  supabase_key: "prod_key_12345"
  restaurant_id: "rest-prod"
"""
    secrets_path = temp_dir / "secrets_prod.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture
def temp_secrets_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 secrets.yaml 파일 생성"""
    secrets_content = """mode: testnet

staging:
  supabase_url: "https://staging.supabase.co"
  supabase_key: "staging_key"
  restaurant_id: "rest-staging"
"""
    secrets_path = temp_dir / "secrets_invalid.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path
