"""
ChefSpeak Backend — FastAPI application.
REST + WebSocket API for the hands-free recipe assistant page.
"""

from dotenv import load_dotenv

from constants import PROJECT_ROOT, FRONTEND_DIR

# Load .env from project root before config modules read os.environ
load_dotenv(PROJECT_ROOT / ".env")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from backend.api.routes import router as api_router
from backend.api.websocket import router as ws_router
from backend.config import VERSION

app = FastAPI(
    title="ChefSpeak API",
    description="Voice-driven recipe step assistant",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
app.include_router(ws_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/")
async def serve_index():
    return FileResponse(FRONTEND_DIR / "index.html")


# Mount static files after routes so API routes take priority
if FRONTEND_DIR.exists():
    app.mount("/static", StaticFiles(directory=FRONTEND_DIR), name="frontend")
