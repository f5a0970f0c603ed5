from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os

from dotenv import load_dotenv
from pathlib import Path

env_path = Path(__file__).parent.parent / '.env.local'
load_dotenv(dotenv_path=env_path)

from routers import checkins
from routers import daily_tasks
from routers import settings
from routers import stats
from routers import todos
from routers import users
from middleware import APIKeyMiddleware, PerformanceMiddleware
from services.document_store import StorageError

app = FastAPI(title="Duo Study Dashboard")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ALLOW_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(PerformanceMiddleware)
app.add_middleware(APIKeyMiddleware)

@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    # Settings and day documents are written separately; the client should
    # re-fetch and retry the whole operation.
    print(f"Storage Error: {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": f"Storage failure: {exc}"})

# Include routers
app.include_router(checkins.router, prefix="/api", tags=["checkins"])
app.include_router(daily_tasks.router, prefix="/api", tags=["daily-tasks"])
app.include_router(settings.router, prefix="/api", tags=["settings"])
app.include_router(users.router, prefix="/api", tags=["users"])
app.include_router(todos.router, prefix="/api", tags=["todos"])
app.include_router(stats.router, prefix="/api", tags=["stats"])

@app.get("/health")
async def health_check():
    return {"status": "ok"}
