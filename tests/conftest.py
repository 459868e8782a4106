import os
import re
from urllib.parse import parse_qs

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-signing-secret")
os.environ.setdefault("ENVIRONMENT", "test")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.pool import StaticPool

from official.database import Base
from official.init_db import get_db
from official.main import app
from official.models import User
from official.services.sms_service import SmsClient, get_sms_client

CODE_PATTERN = re.compile(r"^Your Official verification code is: (\d{4})$")


class SmsOutbox:
    """Records messages the mocked Twilio endpoint accepted."""

    def __init__(self):
        self.messages = []
        self.fail_with = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"message": "provider error"})
        form = parse_qs(request.content.decode())
        self.messages.append({"to": form["To"][0], "from": form["From"][0], "body": form["Body"][0]})
        return httpx.Response(201, json={"sid": f"SM{len(self.messages):032d}"})

    def last_code(self, phone: str) -> str:
        for message in reversed(self.messages):
            if message["to"] == phone:
                match = CODE_PATTERN.match(message["body"])
                if match:
                    return match.group(1)
        raise AssertionError(f"no verification code sent to {phone}")

    def sent_to(self, phone: str) -> list:
        return [m for m in self.messages if m["to"] == phone]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def sms_outbox():
    return SmsOutbox()


@pytest.fixture
def sms_client(sms_outbox):
    return SmsClient(
        account_sid="AC00000000000000000000000000000000",
        auth_token="test-auth-token",
        from_number="+15550000000",
        api_url="https://twilio.test/2010-04-01",
        transport=httpx.MockTransport(sms_outbox.handler),
    )


@pytest_asyncio.fixture
async def client(session_factory, sms_client):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sms_client] = lambda: sms_client
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def make_user(db: AsyncSession, phone: str, verified: bool = True, name: str = None) -> User:
    user = User(phone=phone, verified=verified, name=name)
    db.add(user)
    await db.commit()
    return user


def as_current_user(user: User) -> dict:
    return {"uid": user.id, "phone": user.phone}


async def login(client: httpx.AsyncClient, sms_outbox: SmsOutbox, phone: str) -> dict:
    """Run signup + verify for a phone and return the verify response body."""
    response = await client.post("/auth/signup", json={"phone": phone})
    assert response.status_code == 200, response.text
    normalized = response.json()["phone"]
    response = await client.post("/auth/verify", json={"phone": normalized, "code": sms_outbox.last_code(normalized)})
    assert response.status_code == 200, response.text
    return response.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
