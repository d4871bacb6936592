"""
금액 유틸리티

모든 금액은 Decimal(소수점 2자리)로 다룸. float 연산 금지.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """입력 값을 소수점 2자리 Decimal로 정규화

    float은 str()을 거쳐 변환하여 이진 표현 오차를 피함.

    Args:
        value: 금액 (Decimal, int, float, 숫자 문자열)

    Returns:
        소수점 2자리로 반올림된 Decimal

    Raises:
        TypeError: bool 또는 숫자가 아닌 타입
        ValueError: 숫자로 해석할 수 없거나 NaN/Infinity이거나 범위를 벗어난 경우

    Example:
        >>> to_money("10.005")
        Decimal('10.01')
    """
    # bool은 int의 하위 타입이므로 먼저 배제
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float, str)):
        raise TypeError(f"금액 타입이 올바르지 않습니다: {type(value).__name__}")

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"금액으로 해석할 수 없습니다: {value!r}") from e

    if not amount.is_finite():
        raise ValueError(f"유한한 금액이 아닙니다: {value!r}")

    # 기본 정밀도(28자리)를 넘는 값은 quantize에서 InvalidOperation
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"금액 범위를 벗어났습니다: {value!r}") from e


def format_brl(value: Decimal | int | float | None) -> str:
    """금액을 브라질 헤알 표기로 포맷

    천 단위 구분자 ".", 소수점 ",". None이면 "R$ 0,00".

    Example:
        >>> format_brl(Decimal("1234.5"))
        'R$ 1.234,50'
        >>> format_brl(Decimal("-20"))
        '-R$ 20,00'
    """
    if value is None:
        return "R$ 0,00"

    amount = to_money(value)
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):,.2f}"  # 1,234.50
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"
