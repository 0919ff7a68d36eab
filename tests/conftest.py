"""Shared test fixtures."""

from __future__ import annotations

import os
from datetime import date, datetime, timedelta

import pytest

# In-memory SQLite and no real LLM for tests
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = ""
os.environ["JWT_SECRET"] = "test-secret"

from fastapi.testclient import TestClient

from backend.db import Base, make_engine, make_session_factory
from backend.main import create_app
from backend.models import ActionItem, Contact, Deal, DealContact, Transcript, User


class FakeLLM:
    """Stands in for LLMClient: records prompts, returns a canned reply."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str, model: str | None = None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class Factory:
    """Inserts rows directly, bypassing the API."""

    BASE_TIME = datetime(2024, 5, 1, 12, 0, 0)

    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, email: str = "rep@example.com") -> User:
        return self._save(User(email=email, name="Sales Rep"))

    def deal(self, user: User, name: str = "Acme Expansion") -> Deal:
        return self._save(Deal(
            name=name,
            user_id=user.id,
            created_at=self.BASE_TIME,
            updated_at=self.BASE_TIME,
        ))

    def transcript(self, deal: Deal, file_name: str = "call.txt", content: str = "We discussed pricing.",
                   minutes_after: int = 0) -> Transcript:
        ts = self.BASE_TIME + timedelta(minutes=minutes_after)
        return self._save(Transcript(
            deal_id=deal.id,
            file_name=file_name,
            content=content,
            call_date=date(2024, 5, 1),
            call_time="10:30",
            created_at=ts,
            updated_at=ts,
        ))

    def contact(self, user: User, deal: Deal, first_name: str, last_name: str,
                role: str | None = None, job_title: str | None = None) -> Contact:
        c = self._save(Contact(
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name.lower()}@{last_name.lower()}.com",
            job_title=job_title,
            user_id=user.id,
        ))
        self._save(DealContact(deal_id=deal.id, contact_id=c.id, role_in_deal=role))
        return c

    def action_item(self, deal: Deal, user: User, description: str, is_completed: bool = False,
                    transcript: Transcript | None = None) -> ActionItem:
        return self._save(ActionItem(
            deal_id=deal.id,
            user_id=user.id,
            description=description,
            is_completed=is_completed,
            transcript_id=transcript.id if transcript else None,
        ))


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = make_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def factory(db) -> Factory:
    return Factory(db)


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def app(fake_llm):
    return create_app(database_url="sqlite://", llm=fake_llm)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def signup(client: TestClient, email: str = "rep@example.com") -> dict:
    resp = client.post("/api/auth/signup", json={
        "first_name": "Sam",
        "last_name": "Seller",
        "email": email,
        "password": "s3cret-pass",
    })
    assert resp.status_code == 200, resp.text
    return resp.json()
