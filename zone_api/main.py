from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .database.config import settings
from .database.database import check_connection, create_tables
from .core.handlers import register_exception_handlers
from .core.logging import configure_logging
from .core.middleware import RequestIDMiddleware
# Registrar todos los modelos antes de crear tablas
from .users.models import User  # noqa: F401
from .users.sessions.models import UserSession  # noqa: F401
from .zones.models import Zone  # noqa: F401
from .activities.models import Activity  # noqa: F401
import logging

# Configurar logging
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Crear la aplicación FastAPI
app = FastAPI(
    title=settings.app_name,
    description="API de zonas (geocercas) y actividad de entrada/salida",
    version=settings.version,
    debug=settings.debug
)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

register_exception_handlers(app)

@app.on_event("startup")
async def startup_event():
    logger.info(f"🚀 Iniciando {settings.app_name} ({settings.environment})")

    if check_connection():
        logger.info("✅ Base de datos conectada correctamente")
        create_tables()
    else:
        logger.error("❌ No se pudo conectar a la base de datos")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Se ejecuta al cerrar la aplicación.
    """
    logger.info("🛑 Cerrando la aplicación")


# Incluir routers
from .auth.router import router as auth_router
from .users.router import router as users_router
from .zones.router import router as zones_router
from .activities.router import router as activities_router
from .health.router import router as health_router

app.include_router(health_router)
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(zones_router, prefix=settings.api_prefix)
app.include_router(activities_router, prefix=settings.api_prefix)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "zone_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info",
        proxy_headers=True,
        forwarded_allow_ips="*"
    )
