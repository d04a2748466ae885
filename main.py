from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware
import models
from config import settings
from db import engine
from routes import auth_routes, story_routes, chapter_routes, reading_list_routes, user_routes
from utils import attachments
from utils.exceptions import MekarPadError
from utils.logger import get_logger

logger = get_logger(__name__)

# Create database tables
models.Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="MekarPad Backend",
    description="Backend API for writing, publishing and reading serialized stories.",
    version="1.0.0"
)

# ── Cookie session: pending sign-in slot + signed-in slot ──────────────────────
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    session_cookie="mekarpad_session",
    max_age=14 * 24 * 60 * 60,  # 14 days
    same_site="lax",
    https_only=settings.is_production,
)

# ── CORS: allow the frontend during development ───────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False, # Must be False when allow_origins=["*"]
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MekarPadError)
async def handle_domain_error(request: Request, exc: MekarPadError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include routers
app.include_router(auth_routes.router)
app.include_router(user_routes.router)
app.include_router(story_routes.router)
app.include_router(chapter_routes.router)
app.include_router(reading_list_routes.router)

# Serve uploaded cover images as static URLs
app.mount("/static/covers", StaticFiles(directory=str(attachments.covers_dir())), name="covers")

@app.get("/")
def read_root():
    return {"message": "Welcome to MekarPad! Visit /docs for API documentation."}

@app.get("/up")
def health():
    return {"status": "ok"}
