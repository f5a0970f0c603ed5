import os
import time
import json
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from fastapi.responses import JSONResponse

# Requests at or above this duration are flagged in the log
SLOW_REQUEST_MS = float(os.getenv("SLOW_REQUEST_MS", "500"))

def _resource(path: str) -> str:
    # /api/checkins/2026-02-01/toggle -> checkins
    parts = [p for p in path.split("/") if p]
    if len(parts) >= 2 and parts[0] == "api":
        return parts[1]
    return parts[0] if parts else "root"

class PerformanceMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        elapsed = time.perf_counter() - start_time
        duration_ms = round(elapsed * 1000, 2)

        log_entry = {
            "type": "performance_log",
            "resource": _resource(request.url.path),
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "slow": duration_ms >= SLOW_REQUEST_MS,
        }
        print(json.dumps(log_entry))

        response.headers["X-Process-Time"] = f"{elapsed:.6f}"
        return response

class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Shared-secret guard for when the dashboard is reachable beyond localhost.
    Only enforced when INTERNAL_API_KEY is configured.
    """
    async def dispatch(self, request: Request, call_next):
        # Skip check for health check or OPTIONS requests
        if request.url.path == "/health" or request.method == "OPTIONS":
            return await call_next(request)

        # Trim whitespace to prevent stray newlines in env files
        expected_key = os.getenv("INTERNAL_API_KEY", "").strip()
        if not expected_key:
            return await call_next(request)

        request_key = request.headers.get("X-INTERNAL-API-KEY", "").strip()
        if request_key != expected_key:
            print(f"Auth Failed: path={request.url.path}, Expected={expected_key[:4]}***") # Log masked key for debug
            return JSONResponse(status_code=403, content={"detail": "Forbidden: Invalid API Key"})

        return await call_next(request)
