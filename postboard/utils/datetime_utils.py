# postboard/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간 처리를 위한 유틸리티 모듈

- 모든 시각은 UTC timezone-aware datetime 으로 다룹니다.
- Firestore 에 저장하거나 읽을 때 중첩된 dict/list 까지 재귀적으로 변환합니다.
"""

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """시간 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """timezone-naive 인 경우 UTC로 간주하고, 그 외에는 UTC로 변환"""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 datetime 필드를 변환

        변환 규칙:
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.ensure_utc(obj)
        if isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 timestamp 필드를 UTC datetime으로 변환

        Firestore 는 DatetimeWithNanoseconds(datetime 하위 클래스)를 돌려주므로
        일반 datetime 으로 정규화합니다.
        """
        try:
            if isinstance(obj, datetime):
                return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)
            if isinstance(obj, dict):
                return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
            if isinstance(obj, list):
                return [DateTimeUtils.from_firestore(item) for item in obj]
            return obj
        except (OverflowError, OSError, ValueError) as e:
            # 변환 실패 시 원본 객체 반환 (로그만 남김)
            logger.error(f"Firestore 읽기 변환 실패: {obj} ({type(obj)}) - {e}")
            return obj
