# cocopik/main.py
# Главная точка входа FastAPI для Coco-Pik.
#  • Группы-вишлисты вокруг 3D-моделей: создание, приглашение по короткому коду, вступление.
#  • Личность - непрозрачный deviceToken, без логина.
#  • Ошибки отдаются единым телом {"error": "<сообщение>"}.

from __future__ import annotations

import logging
import os
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from dotenv import load_dotenv
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
log = logging.getLogger(__name__)

from cocopik.db import Base, engine  # noqa: E402  инициализация БД/пула соединений

from cocopik.routers.groups import router as groups_router  # noqa: E402
from cocopik.routers.users import router as users_router  # noqa: E402
from cocopik.routers.landing import router as landing_router  # noqa: E402

API_NAME = "Coco-Pik Backend API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Simple group wishlist API - like Airbnb wishlist but for 3D models"

app = FastAPI(
    title=API_NAME,
    version=API_VERSION,
    description=API_DESCRIPTION,
)

# --- CORS: клиент - мобильное приложение и веб, поэтому открыто для всех ---
# Заголовки ставятся на каждый ответ, в том числе на ошибки и на запросы без Origin.
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    # любой OPTIONS - пустой 200 с CORS-заголовками, до роутинга
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


# --- Единый формат ошибок ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "Endpoint not found"
    headers = {**(getattr(exc, "headers", None) or {}), **CORS_HEADERS}
    return JSONResponse({"error": message}, status_code=exc.status_code, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    log.info("invalid request body on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse({"error": "Invalid request body"}, status_code=400, headers=CORS_HEADERS)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.exception("API Error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500, headers=CORS_HEADERS)


# --- Подключение роутеров ---
app.include_router(groups_router,  prefix="/api/groups", tags=["Groups"])
app.include_router(users_router,   prefix="/api/users",  tags=["Users"])
app.include_router(landing_router)


@app.get("/")
def root():
    """Описание API: список доступных ручек."""
    return {
        "message": API_NAME,
        "version": API_VERSION,
        "description": API_DESCRIPTION,
        "endpoints": {
            "POST /api/groups": "Create a new group with invitation link",
            "GET /api/groups/:code": "Get group details by invitation code",
            "POST /api/groups/:code/join": "Join a group using invitation code",
            "GET /api/users/:deviceToken/groups": "Get groups user has joined",
            "GET /api/users/:deviceToken/created-groups": "Get groups user has created",
            "GET /g/:code": "Invitation landing page",
        },
        "docs": "/docs",
    }


# Для локальной разработки без Alembic: DB_CREATE_ALL=1 создаст таблицы при старте.
@app.on_event("startup")
def _startup_create_tables():
    if os.getenv("DB_CREATE_ALL") == "1":
        Base.metadata.create_all(bind=engine)
        log.info("DB_CREATE_ALL=1: tables created")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("cocopik.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=False)
