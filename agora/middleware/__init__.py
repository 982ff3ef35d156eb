"""HTTP middleware: request ID and request size limit.

Applied in agora.main; order matters (last added = outermost).
"""

from agora.middleware.request_id import RequestIDMiddleware
from agora.middleware.request_size_limit import RequestSizeLimitMiddleware

__all__ = [
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
]
