# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment is set before any
# inkwell module is imported
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="inkwell-tests-"))
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'app.db'}"
os.environ["UPLOADS_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["LIKE_TOGGLE_BASE_DELAY"] = "0.001"
os.environ["LIKE_TOGGLE_MAX_DELAY"] = "0.01"

from collections.abc import AsyncGenerator  # noqa: E402
from dataclasses import dataclass  # noqa: E402
from datetime import timedelta  # noqa: E402
from io import BytesIO  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from inkwell.db import get_session  # noqa: E402
from inkwell.dependencies import get_thumbnail_service  # noqa: E402
from inkwell.main import app  # noqa: E402
from inkwell.managers.token_manager import create_access_token  # noqa: E402
from inkwell.models import PostDB, TopicDB, UserDB  # noqa: E402
from inkwell.services import ThumbnailService  # noqa: E402
from inkwell.services.storage import LocalStorage  # noqa: E402

SessionFactory = async_sessionmaker[AsyncSession]


@dataclass(frozen=True)
class Seed:
    """Rows every DB-backed test starts with."""

    author: UserDB
    reader: UserDB
    topic: TopicDB
    other_topic: TopicDB


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Per-test SQLite database with the schema created."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={"timeout": 30},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> SessionFactory:
    """Session factory bound to the test database."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory: SessionFactory) -> AsyncGenerator[AsyncSession]:
    """A session for repository level tests."""
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture
async def seed(session_factory: SessionFactory) -> Seed:
    """Insert two users and two topics."""
    seeded = Seed(
        author=UserDB(id=uuid4(), username="ada", display_name="Ada L."),
        reader=UserDB(id=uuid4(), username="grace", display_name=None),
        topic=TopicDB(id=uuid4(), name="python"),
        other_topic=TopicDB(id=uuid4(), name="databases"),
    )
    async with session_factory() as db_session:
        db_session.add_all([seeded.author, seeded.reader, seeded.topic, seeded.other_topic])
        await db_session.commit()
    return seeded


@pytest.fixture
async def stored_post(session_factory: SessionFactory, seed: Seed) -> PostDB:
    """A post written by the seeded author."""
    post = PostDB(
        author_id=seed.author.id,
        topic_id=seed.topic.id,
        title="Writing async Python that reads well",
        content="Coroutines are easiest to follow when every await is a visible step.",
    )
    async with session_factory() as db_session:
        db_session.add(post)
        await db_session.commit()
    return post


def bearer(user: UserDB) -> dict[str, str]:
    """Authorization header for a user."""
    token = create_access_token(
        user_id=user.id,
        username=user.username,
        expires_delta=timedelta(minutes=30),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(seed: Seed) -> dict[str, str]:
    """Headers authenticating the post author."""
    return bearer(seed.author)


@pytest.fixture
def reader_headers(seed: Seed) -> dict[str, str]:
    """Headers authenticating a user who did not write the post."""
    return bearer(seed.reader)


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    """Uploads directory for thumbnail tests."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
async def client(
    session_factory: SessionFactory,
    uploads_dir: Path,
) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client wired to the test database."""

    async def override_get_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as db_session:
            try:
                yield db_session
                await db_session.commit()
            except Exception:
                await db_session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_thumbnail_service] = lambda: ThumbnailService(
        LocalStorage(uploads_dir),
    )
    async with AsyncClient(
        base_url="http://test",
        transport=ASGITransport(app=app),
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def valid_png_bytes() -> bytes:
    """Create valid PNG image bytes."""
    img = Image.new("RGBA", (64, 64), color="blue")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def valid_jpeg_bytes() -> bytes:
    """Create valid JPEG image bytes."""
    img = Image.new("RGB", (64, 64), color="red")
    buffer = BytesIO()
    img.save(buffer, format="JPEG")
    return buffer.getvalue()
