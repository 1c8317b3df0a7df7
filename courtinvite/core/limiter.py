# courtinvite/core/limiter.py
"""
Shared slowapi limiter. Endpoints import it from here rather than from
main, which imports the endpoints.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from courtinvite.core.config import settings

# Keyed by client IP; guests have no account to key on.
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
