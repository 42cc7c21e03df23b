import os
import sys
import logging

# Ensure this directory is in the path for Vercel and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, DATA_BACKEND
from routes.analytics_routes import router as analytics_router
from routes.dashboard_routes import router as dashboard_router
from routes.habit_routes import router as habit_router
from routes.task_routes import router as task_router
from services.session_store import sessions

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# The Supabase schema lives in the managed database; only the local store needs tables
if DATA_BACKEND == "sqlite":
    from database import init_db
    init_db()

app = FastAPI(title="Habit Tracker")


@app.get("/api/v1/health-check")
async def health():
    sessions.clear_expired()
    return {"status": "ok", "backend": DATA_BACKEND, "sessions": sessions.get_stats()}


# Configure CORS for the web front end
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(dashboard_router)
app.include_router(habit_router)
app.include_router(task_router)
app.include_router(analytics_router)

logger.info(f"Habit Tracker API ready (data backend: {DATA_BACKEND})")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
