from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from official.config import settings
import logging

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.sqlalchemy_database_url

# Log the connection string with the password masked
masked_url = SQLALCHEMY_DATABASE_URL.replace(
    settings.db_password.get_secret_value(), "*****"
)
logger.info(f"SQLAlchemy DB URL: {masked_url}")

engine = create_async_engine(
    SQLALCHEMY_DATABASE_URL
    )

# Responses are serialized after commit, so committed objects keep their loaded state
AsyncSessionLocal = async_sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine, class_=AsyncSession)

Base = declarative_base()
