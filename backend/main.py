# backend/main.py
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()

from config import settings
from database import init_db
from utils.uploads import UPLOAD_URL_PREFIX, ensure_upload_dir

# Import routerów
from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.categories import router as categories_router
from routes.clients import router as clients_router
from routes.co_clients import router as co_clients_router
from routes.products import router as products_router
from routes.product_photos import router as product_photos_router
from routes.commands import router as commands_router
from routes.stats import router as stats_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("bebe_depot")

# Inicjalizacja
init_db()

app = FastAPI(title="Bébé-Dépôt API", version="1.0.0")

# Uploads - upewniamy się, że katalog istnieje
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(ensure_upload_dir())), name="uploads")

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================
# ERROR HANDLERS
# =========================
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, details)
    return JSONResponse(status_code=400, content={"message": "Validation error", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# Rejestracja routerów
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(categories_router)
app.include_router(clients_router)
app.include_router(co_clients_router)
app.include_router(products_router)
app.include_router(product_photos_router)
app.include_router(commands_router)
app.include_router(stats_router)


@app.get("/")
def read_root():
    return {"message": "Bébé-Dépôt API est en ligne"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=False)
