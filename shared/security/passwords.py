from passlib.context import CryptContext

from shared.config.settings import PASSWORD_HASH_ROUNDS

_pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=PASSWORD_HASH_ROUNDS,
)


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return _pwd_context.verify(plain, hashed)
