from __future__ import annotations

from typing import Any

from httpx import AsyncClient, Response
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import create_access_token, hash_password
from src.infrastructure.db.models import UserModel, UserRole

API = "/api/v1"
PASSWORD = "secret123"


async def create_account(
    session: AsyncSession,
    *,
    name: str,
    role: UserRole = UserRole.USER,
    email: str | None = None,
) -> UserModel:
    account = UserModel(
        name=name,
        email=email or f"{name.replace(' ', '.').lower()}@example.com",
        hashed_password=hash_password(PASSWORD),
        role=role,
    )
    session.add(account)
    await session.commit()
    return account


def auth_headers(account: UserModel) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(account.id)}"}


def bootcamp_payload(name: str = "Devworks Bootcamp", **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": name,
        "description": "Full stack web development bootcamp",
        "website": "https://devworks.example.com",
        "phone": "(111) 111-1111",
        "email": "enroll@devworks.example.com",
        "address": "233 Bay State Rd Boston MA 02215",
        "careers": ["Web Development", "UI/UX", "Business"],
        "housing": True,
        "jobAssistance": True,
        "jobGuarantee": False,
        "acceptGi": True,
    }
    payload.update(overrides)
    return payload


def course_payload(title: str = "Front End Web Development", **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": title,
        "description": "HTML, CSS and JavaScript fundamentals",
        "weeks": "8",
        "tuition": 8000,
        "minimumSkill": "beginner",
        "scholarshipAvailable": True,
    }
    payload.update(overrides)
    return payload


def review_payload(rating: int = 8, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": "Learned a ton",
        "text": "Great instructors and a solid curriculum",
        "rating": rating,
    }
    payload.update(overrides)
    return payload


async def create_bootcamp(
    client: AsyncClient, owner: UserModel, name: str = "Devworks Bootcamp", **overrides: Any
) -> dict[str, Any]:
    response = await client.post(
        f"{API}/bootcamps", json=bootcamp_payload(name, **overrides), headers=auth_headers(owner)
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_course(
    client: AsyncClient, owner: UserModel, bootcamp_id: str, **overrides: Any
) -> Response:
    return await client.post(
        f"{API}/bootcamps/{bootcamp_id}/courses",
        json=course_payload(**overrides),
        headers=auth_headers(owner),
    )


async def create_review(
    client: AsyncClient, author: UserModel, bootcamp_id: str, rating: int = 8, **overrides: Any
) -> Response:
    return await client.post(
        f"{API}/bootcamps/{bootcamp_id}/reviews",
        json=review_payload(rating, **overrides),
        headers=auth_headers(author),
    )
