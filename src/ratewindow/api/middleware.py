import math

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse
import structlog

logger = structlog.get_logger()

class RateLimitMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:

        strategy = getattr(request.app.state, "strategy", None)
        quota_manager = getattr(request.app.state, "quota_manager", None)

        if not strategy or not quota_manager:
            logger.warning("middleware_uninitialized_skipping")
            return await call_next(request)

        api_key = request.headers.get("X-API-Key")
        client_ip = request.client.host if request.client else "unknown"
        action_id = f"api:{api_key}" if api_key else f"ip:{client_ip}"

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            action_id=action_id,
            path=request.url.path,
            method=request.method
        )

        tier = quota_manager.resolve_tier(api_key)
        spec = quota_manager.spec_for(action_id, api_key)
        result = await strategy.increment(spec)

        logger.info(
            "rate_limit_check",
            count=result.new_value,
            over_limit=result.is_over_limit,
            limit=spec.limit,
            tier=tier
        )

        headers = {
            "X-RateLimit-Limit": str(spec.limit),
            "X-RateLimit-Remaining": str(max(0, spec.limit - result.new_value)),
            "X-RateLimit-Reset": str(result.remaining_time_ms),
            "X-User-Tier": tier,
        }

        if result.is_over_limit:
            retry_after = max(1, math.ceil(result.remaining_time_ms / 1000))
            headers["Retry-After"] = str(retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": "Quota exceeded",
                    "tier": tier,
                    "retry_after": retry_after,
                },
                headers=headers,
            )

        response = await call_next(request)

        for key, value in headers.items():
            response.headers[key] = value

        return response
