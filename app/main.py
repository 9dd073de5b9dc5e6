import os
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from app.domain.leaderboard.errors import LeaderboardError
from app.routers import leaderboard as leaderboard_router

load_dotenv()
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="Skills Leaderboard API")

# ==== CORS ====
origins = os.getenv("CORS_ORIGINS", "")
origins_list = [o.strip() for o in origins.split(",")] if origins else ["http://localhost:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Errores de configuración al construir el servicio (dependency) → mismo cuerpo de error
@app.exception_handler(LeaderboardError)
async def leaderboard_error_handler(request: Request, exc: LeaderboardError):
    return JSONResponse(status_code=500, content={"error": str(exc)})

# ==== Routers ====
app.include_router(leaderboard_router.router)

@app.get("/health")
def health():
    return {"status": "ok"}
