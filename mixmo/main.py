import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mixmo.config import settings
from mixmo.routers import auth, play, realtime, rooms, words

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Mixmo",
    description="Game-state server for two-player Mixmo",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(rooms.router)
app.include_router(play.router)
app.include_router(words.router)
app.include_router(realtime.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
