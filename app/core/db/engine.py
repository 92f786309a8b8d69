from typing import AsyncGenerator
from app.core.config import config as settings
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool


engine = create_async_engine(
    settings.db_url,
    echo=False,
    poolclass=(
        NullPool if not (settings.is_production) else None
    ),  # Disable pooling in debug
)

# Session factory, also handed to the orchestrator for its own units of work
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,  # Manual control over flushing
)


async def get_db_util() -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency for FastAPI."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
