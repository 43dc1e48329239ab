"""Request logging middleware.

Logs every HTTP request with method, path, status code, latency, the
account the call acted on (when the route carries one) and a short request
ID. The request_id is also injected into request.state so router handlers
can include it in ApiResponse.

Log format:
    INFO [POST] /api/v1/admin/withdrawals/WDR1/approve → 200 (3ms) acct=- req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("bk.request")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        # Routing fills path_params on the shared scope during call_next.
        account_id = request.scope.get("path_params", {}).get("account_id", "-")
        logger.info(
            "[%s] %s → %d (%.0fms) acct=%s %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            account_id,
            request.state.request_id,
        )
        return response
