from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import LeagueError
from app.core.logging import get_logger, setup_logging

# IMPORTANTE: Importar Base y Engine para que funcione la creación de tablas
from app.db.session import engine, Base

# Importar modelos para que SQLAlchemy los "vea" antes de crear las tablas
from app.db.models import _all

# Routers
from app.api.auth import router as auth_router
from app.api.ingest import router as ingest_router
from app.api.sessions import router as sessions_router
from app.api.results import router as results_router
from app.api.edits import router as edits_router
from app.api.orphans import router as orphans_router
from app.api.standings import router as standings_router
from app.api.admin import router as admin_router

setup_logging(settings.log_level, json_format=settings.log_json)
logger = get_logger("api")

app = FastAPI(
    title="League Results Engine",
    version="1.0.0"
)

# Creamos las tablas en la base de datos
Base.metadata.create_all(bind=engine)


@app.exception_handler(LeagueError)
async def league_error_handler(request: Request, exc: LeagueError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, extra={"context": exc.context})
    else:
        logger.info("%s %s -> %s %s", request.method, request.url.path, exc.http_status, exc.error_code)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


# Conectamos las piezas (routers)
app.include_router(auth_router)
app.include_router(ingest_router)
app.include_router(sessions_router)
app.include_router(results_router)
app.include_router(edits_router)
app.include_router(orphans_router)
app.include_router(standings_router)
app.include_router(admin_router)


# Configuramos el permiso para que el frontend pueda hablar con la API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def read_root():
    return {"message": "League results engine running"}
