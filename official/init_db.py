from .database import AsyncSessionLocal

async def get_db():
    """Request-scoped session; closing it rolls back anything left uncommitted."""
    async with AsyncSessionLocal() as db:
        yield db
