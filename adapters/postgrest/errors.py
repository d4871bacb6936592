"""
원격 스토어 에러

PostgREST(Supabase) 호출 실패를 세 가지로 구분.
- TransientStoreError: 네트워크/타임아웃/5xx/429 (재시도 대상)
- StoreApiError: 4xx 등 요청 자체가 거부된 경우
- MalformedResponseError: 응답 형식이 예상과 다른 경우
"""


class StoreError(Exception):
    """원격 스토어 에러 기본 클래스

    Attributes:
        code: 에러 코드 (PostgREST code 또는 HTTP 상태 코드 문자열)
        message: 에러 메시지
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"Store Error [{code}]: {message}")


class TransientStoreError(StoreError):
    """일시적 스토어 에러

    네트워크 단절, 타임아웃, 서버 과부하(5xx, 429) 시 발생.
    쓰기 요청에서 발생한 경우 서버 측 반영 여부를 알 수 없음.
    """
    pass


class StoreApiError(StoreError):
    """스토어 API 에러

    제약 조건 위반, 존재하지 않는 RPC(PGRST202) 등 요청이 거부된 경우.
    """
    pass


class MalformedResponseError(StoreError):
    """응답 형식 에러

    JSON이 아니거나 필수 컬럼이 없는 등 응답을 해석할 수 없는 경우.
    """

    def __init__(self, message: str):
        super().__init__(code="MALFORMED", message=message)
