# postboard/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.
from datetime import timedelta


def _int_env(name: str, default: int) -> int:
    """정수형 환경 변수를 읽습니다. 값이 없거나 숫자가 아니면 기본값을 사용합니다."""
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명에 사용되는 키. 토큰 위변조를 방지합니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    # access token 유효 기간 (기본 7일)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=_int_env('JWT_ACCESS_TOKEN_DAYS', 7))

    # 'firestore' 또는 'memory'. memory는 로컬 실행 및 테스트용입니다.
    DATABASE_BACKEND = os.getenv('DATABASE_BACKEND', 'firestore')
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # 외부 스토리지 호출은 이 시간(초)을 넘기면 실패로 처리합니다.
    STORAGE_TIMEOUT_SECONDS = _int_env('STORAGE_TIMEOUT_SECONDS', 10)
    # 이미지 병렬 삭제에 사용할 스레드 수
    STORAGE_DELETE_WORKERS = _int_env('STORAGE_DELETE_WORKERS', 4)

    MAX_IMAGES_PER_POST = 5
    ALLOWED_IMAGE_TYPES = ('image/jpeg', 'image/png', 'image/gif', 'image/webp')
    # Flask가 요청 본문 크기를 제한합니다. (10MB)
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    FEED_DEFAULT_LIMIT = 10


class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    # 테스트는 Firebase 없이 메모리 저장소로 실행합니다.
    DATABASE_BACKEND = 'memory'
    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length-for-hs256'
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')


class ProductionConfig(Config):
    """운영 환경 설정. 디버그 모드를 사용하지 않습니다."""
    DEBUG = False


# FLASK_ENV 값에 따라 create_app에서 설정 클래스를 선택하는 데 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
