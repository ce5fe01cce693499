# shared/auth/__init__.py
from .basic_auth import verify_basic_auth

__all__ = [
    'verify_basic_auth'
]
