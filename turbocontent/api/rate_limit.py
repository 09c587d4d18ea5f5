from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from turbocontent.config import settings

# keyed by client IP; covers anonymous callers the usage gate never sees
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit_default])
