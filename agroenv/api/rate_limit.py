"""
Shared rate limiter.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from agroenv.config import settings

# Rate limiter
limiter = Limiter(key_func=get_remote_address)

ANALYSIS_RATE_LIMIT = f"{settings.rate_limit_requests}/minute"
