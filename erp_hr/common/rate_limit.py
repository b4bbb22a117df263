"""Rate limiting configuration using slowapi.

The module-level Limiter is wired into the FastAPI app in main.py through
SlowAPIMiddleware, so the default limit covers every route. Routers
may import it to override limits on individual endpoints.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# 60 requests/minute per client IP unless a route overrides it
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["60/minute"],
)
