from datetime import timedelta

import jwt
from django.conf import settings
from django.utils import timezone


# ------------------ JWT Utilities ------------------

def create_jwt_token(payload: dict, expires_minutes: int = 60) -> str:
    """Create a signed HS256 token that expires after ``expires_minutes``."""
    now = timezone.now()
    payload = dict(payload)
    payload.update({
        'exp': now + timedelta(minutes=expires_minutes),
        'iat': now,
    })
    return jwt.encode(payload, settings.SECRET_KEY, algorithm='HS256')


def decode_jwt_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=['HS256'])


def create_session_token(user) -> str:
    """Issue a login token for ``user`` and make it the only valid one."""
    payload = {
        'user_id': user.id,
        'email': user.email,
        'role': user.role,
    }
    token = create_jwt_token(payload, expires_minutes=settings.JWT_EXPIRES_MINUTES)
    user.current_token_user = token
    user.last_login = timezone.now()
    user.save(update_fields=['last_login', 'current_token_user'])
    return token
