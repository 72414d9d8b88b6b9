"""
Machigai Backend - FastAPI Application Entry Point

Run with: uvicorn machigai.main:app --reload (from backend/)
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from machigai.api import game
from machigai.models.catalog import GAME_THEMES

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"

app = FastAPI(
    title="Machigai",
    description="AI-generated spot-the-difference puzzles",
    version="0.1.0",
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(game.router, prefix="/api/game", tags=["game"])


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "ok", "name": "Machigai", "version": "0.1.0"}


@app.get("/api/themes")
async def list_themes():
    """List the puzzle themes offered to the player"""
    return {"themes": [theme.model_dump() for theme in GAME_THEMES]}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "machigai.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )
