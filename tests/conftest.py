import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tcgserver.db.cards import create_card
from tcgserver.db.database import get_session
from tcgserver.main import app
from tcgserver.models.card import CardElement, CardType
from tcgserver.models.db import Base


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def file_session_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    """Session factory on a file-backed SQLite database.

    Each session gets its own connection, so concurrent callers really
    interleave.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tcg.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def catalog(session_factory) -> dict[str, int]:
    """Seed a small catalog. Returns card ids by name."""
    cards = [
        ("Ember Drake", CardType.MONSTER, CardElement.FIRE, "Breathes sparks."),
        ("Tidecaller", CardType.MONSTER, CardElement.WATER, "Summons the tide."),
        ("Stone Warden", CardType.MONSTER, CardElement.EARTH, ""),
        ("Flame Burst", CardType.SPELL, CardElement.FIRE, "Deal damage to the active monster."),
        ("Fire Energy", CardType.ENERGY, CardElement.FIRE, ""),
    ]
    async with session_factory() as session:
        ids = {}
        for name, card_type, element, legend in cards:
            card = await create_card(session, name, card_type, element, legend=legend)
            ids[name] = card.id
        await session.commit()
    return ids
