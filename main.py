from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from settings.config import settings
from db.db_operation import create_indexes
from core.exceptions import http_exception_handler, validation_exception_handler, global_exception_handler
from utils.logger import get_logger
from routes import auth, menu_routes, order_route

logger = get_logger("main")

app = FastAPI(title="Food Ordering System API", version="1.0.0")

@app.get("/")
async def health_check():
    logger.info("Health check is successful")
    return {
        "status": "ok",
        "app": settings.PROJECT_NAME,
        "message": "FastAPI is running"
    }

@app.on_event("startup")
async def startup_event():
    await create_indexes()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)
app.include_router(auth.router)
app.include_router(menu_routes.router)
app.include_router(order_route.router)
