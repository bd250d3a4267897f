from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from database import Base, engine
from api import users, teams, projects, prizes, checkin
from api.common import STATUS_BY_KIND
from core.exceptions import HackathonException

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 在應用啟動時建立資料庫表
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title="Hackathon Participant API",
    description="Admission, teams, projects, prizes and check-in for a hackathon event",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HackathonException)
async def hackathon_exception_handler(request: Request, exc: HackathonException):
    return JSONResponse(
        status_code=STATUS_BY_KIND[exc.kind],
        content={"detail": str(exc), "kind": exc.kind.value},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal error"})


# Include routers
app.include_router(users.router)
app.include_router(teams.router)
app.include_router(projects.router)
app.include_router(prizes.router)
app.include_router(checkin.router)


@app.get("/")
def root():
    return {"message": "Hackathon Participant API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
