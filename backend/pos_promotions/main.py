import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pos_promotions.core.config import settings
from pos_promotions.core.logging import setup_logging

setup_logging()

app = FastAPI(
    title="POS Promotions API",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Import routers after app creation to avoid circular imports
from pos_promotions.api import promotions

app.include_router(promotions.router)


@app.get("/")
def root():
    return {"status": "ok", "service": "pos-promotions-api"}


@app.get("/api/health")
def health_check():
    return {
        "status": "healthy",
        "env": settings.ENV
    }


def run():
    """Запуск API: pos-promotions или python -m pos_promotions.main"""
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
