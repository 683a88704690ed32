from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.exc import SQLAlchemyError
from .config import settings
import logging

logger = logging.getLogger(__name__)


def build_engine(url: str):
    # SQLite (desarrollo local / tests) no acepta las opciones de pool de Postgres
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,       # Verifica que la conexión esté viva
        pool_recycle=300,         # Recicla cada 5 minutos
        echo=settings.debug,
        connect_args={
            "connect_timeout": 10,
            "options": "-c statement_timeout=30000"  # 30 segundos por query
        }
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    """
    Dependency para los endpoints.
    La sesión se cierra automáticamente al terminar el request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def check_connection(bind=None):
    try:
        with (bind or engine).connect() as connection:
            connection.execute(text("SELECT 1"))
            logger.info("✅ Conexión a la base de datos verificada")
            return True
    except SQLAlchemyError as e:
        logger.error(f"❌ Error probando la conexión: {e}")
        return False

def create_tables(bind=None):
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("✅ Tablas creadas exitosamente")
    except SQLAlchemyError as e:
        logger.error(f"❌ Error creando las tablas: {e}")
        raise
