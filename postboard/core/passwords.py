# postboard/core/passwords.py
"""
비밀번호 해시 설정을 한 곳에서 관리합니다.
비밀번호를 다루는 모든 모듈은 여기의 함수만 사용해야 합니다.
"""

from argon2 import PasswordHasher
from argon2 import exceptions as argon_exc

# Argon2id 파라미터
PASSWORD_HASHER = PasswordHasher(
    time_cost=3,
    memory_cost=65536,     # 64 MB (KB 단위)
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    return PASSWORD_HASHER.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """비밀번호가 해시와 일치하면 True, 아니면 False."""
    try:
        return PASSWORD_HASHER.verify(password_hash, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False
