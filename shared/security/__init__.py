from .jwt_handler import create_access_token, create_user_token, verify_access_token
from .passwords import hash_password, verify_password
from .dependencies import Principal, get_current_principal, require_role
from .rate_limiter import limiter, user_id_or_ip

__all__ = [
    "create_access_token",
    "create_user_token",
    "verify_access_token",
    "hash_password",
    "verify_password",
    "Principal",
    "get_current_principal",
    "require_role",
    "limiter",
    "user_id_or_ip"
]
