"""
core/types.py 테스트

Enum 값이 원격 스토어 컬럼 값과 일치하는지 확인
"""

import pytest

from core.types import MovementType, PaymentMethod, RegisterStatus, RunMode, WritePath


class TestRunMode:
    """RunMode 테스트"""

    def test_values(self) -> None:
        assert RunMode.PRODUCTION.value == "production"
        assert RunMode.STAGING.value == "staging"

    def test_from_string(self) -> None:
        """문자열에서 Enum 생성"""
        assert RunMode("staging") == RunMode.STAGING

    def test_invalid_value(self) -> None:
        with pytest.raises(ValueError):
            RunMode("testnet")


class TestRegisterStatus:
    """RegisterStatus 테스트"""

    def test_values(self) -> None:
        assert [s.value for s in RegisterStatus] == ["OPEN", "CLOSED"]

    def test_str_comparison(self) -> None:
        """str 상속으로 문자열과 직접 비교 가능"""
        assert RegisterStatus.OPEN == "OPEN"


class TestMovementType:
    """MovementType 테스트"""

    def test_values(self) -> None:
        assert MovementType("INCOME") == MovementType.INCOME
        assert MovementType("EXPENSE") == MovementType.EXPENSE

    def test_lowercase_rejected(self) -> None:
        with pytest.raises(ValueError):
            MovementType("income")


class TestPaymentMethod:
    """PaymentMethod 테스트"""

    def test_all_methods(self) -> None:
        assert {m.value for m in PaymentMethod} == {
            "CASH",
            "CREDIT_CARD",
            "DEBIT_CARD",
            "PIX",
            "OTHER",
        }


class TestWritePath:
    """WritePath 테스트"""

    def test_values(self) -> None:
        assert WritePath.VALIDATED.value == "VALIDATED"
        assert WritePath.FALLBACK.value == "FALLBACK"
