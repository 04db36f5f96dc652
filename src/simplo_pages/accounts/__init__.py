"""User accounts, sessions and workspace settings."""

from .auth import AccountService, hash_password, verify_password
from .app_config import AppConfigService, generate_api_key

__all__ = [
    "AccountService",
    "AppConfigService",
    "hash_password",
    "verify_password",
    "generate_api_key",
]
