# postboard/__init__.py

# =====================================================================================
# 1. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Any, Dict, Optional

from flask import Flask
from marshmallow import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 설정 / 예외
from postboard.core.config import config_by_name
from postboard.core.exceptions import PostboardError
from postboard.api.responses import error_response, success_response

# - API 블루프린트
from postboard.api.auth.routes import auth_bp
from postboard.api.posts.routes import posts_bp

# - 서비스 / 저장소
from postboard.api.auth.services import UserService
from postboard.api.feed.services import FeedService
from postboard.api.posts.services import PostService
from postboard.services.storage_service import StorageService
from postboard.repositories.memory import InMemoryPostRepository, InMemoryUserRepository
from postboard.repositories.posts import FirestorePostRepository
from postboard.repositories.users import FirestoreUserRepository


def _init_firebase(app: Flask) -> None:
    """Firebase Admin SDK 를 한 번만 초기화합니다."""
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase credentials file not found: {cred_path}")
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred, {
        'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
    })


def _build_services(app: Flask, overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    서비스 인스턴스를 생성합니다. (의존성 주입)
    overrides 로 전달된 저장소/스토리지는 그대로 사용하고, 나머지는 설정에 따라 생성합니다.
    """
    services: Dict[str, Any] = dict(overrides or {})
    use_memory = app.config.get('DATABASE_BACKEND') == 'memory'

    needs_firebase = 'storage' not in services or (
        not use_memory and not {'post_repository', 'user_repository'} <= services.keys()
    )
    if needs_firebase:
        _init_firebase(app)

    # 1. 다른 서비스의 기반이 되는 저장소와 스토리지를 먼저 생성
    if 'post_repository' not in services:
        services['post_repository'] = InMemoryPostRepository() if use_memory else FirestorePostRepository()
    if 'user_repository' not in services:
        services['user_repository'] = InMemoryUserRepository() if use_memory else FirestoreUserRepository()
    if 'storage' not in services:
        try:
            storage_instance = StorageService()
            storage_instance.init_app(app)
            services['storage'] = storage_instance
            logging.info("Storage service initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize storage service: {e}")
            raise

    # 2. 저장소를 주입받는 도메인 서비스 생성
    services['users'] = UserService(services['user_repository'])
    services['feed'] = FeedService(
        services['post_repository'],
        default_limit=app.config.get('FEED_DEFAULT_LIMIT', 10)
    )
    services['posts'] = PostService(
        post_repository=services['post_repository'],
        storage_service=services['storage'],
        feed_service=services['feed'],
        delete_workers=app.config.get('STORAGE_DELETE_WORKERS', 4)
    )
    return services


def _register_error_handlers(app: Flask, jwt: JWTManager) -> None:
    """모든 오류를 {success: false, error} 형식으로 변환합니다."""

    @app.errorhandler(PostboardError)
    def handle_domain_error(err: PostboardError):
        if err.status_code >= 500:
            logging.error(f"{err.error_code}: {err}", exc_info=True)
        return error_response(err.message, err.status_code, err.error_code, err.details)

    @app.errorhandler(SchemaValidationError)
    def handle_marshmallow_validation(err):
        return error_response("Validation failed", 400, "VALIDATION_ERROR", err.messages)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        if err.code == 404:
            return error_response("Route not found", 404, "NOT_FOUND")
        return error_response(err.description or err.name, err.code, err.name.upper().replace(' ', '_'))

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외. 내부 정보는 응답에 노출하지 않습니다.
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        return error_response("Internal server error", 500, "INTERNAL_SERVER_ERROR")

    # - 토큰 관련 오류 (flask-jwt-extended)
    @jwt.unauthorized_loader
    def handle_missing_token(reason: str):
        return error_response("Not authorized, no token provided", 401, "UNAUTHORIZED")

    @jwt.invalid_token_loader
    def handle_invalid_token(reason: str):
        return error_response("Not authorized, token invalid", 401, "INVALID_TOKEN")

    @jwt.expired_token_loader
    def handle_expired_token(jwt_header, jwt_payload):
        return error_response("Not authorized, token expired", 401, "TOKEN_EXPIRED")


def create_app(config_name: Optional[str] = None, services: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production'. 없으면 FLASK_ENV 를 사용합니다.
    :param services: 미리 만든 저장소/스토리지 (post_repository, user_repository, storage)
    """
    # =====================================================================================
    # 2. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    if not app.config.get('JWT_SECRET_KEY'):
        raise ValueError("JWT_SECRET_KEY must be configured.")

    # =====================================================================================
    # 3. 확장 기능 및 서비스 초기화
    # =====================================================================================
    jwt = JWTManager(app)
    app.services = _build_services(app, services)

    # =====================================================================================
    # 4. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')

    @app.route('/api/health', methods=['GET'])
    def health_check():
        return success_response(message="postboard API is running")

    # =====================================================================================
    # 5. 전역 에러 핸들러 설정
    # =====================================================================================
    _register_error_handlers(app, jwt)

    # =====================================================================================
    # 6. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
