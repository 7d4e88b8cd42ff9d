"""Tests for inviting users into a company."""

from uuid import UUID

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import func, select

from src.api.core.messages import MessageCode
from src.database.models import Membership, User, UserRole
from src.utils.hashing import HashingService
from tests.factories import TEST_PASSWORD
from tests.utils.assertions import (
    assert_error_response,
    assert_permission_error,
    assert_success_response,
    assert_validation_error,
)


def invite_payload(**overrides) -> dict:
    payload = {
        "email": "new.hire@example.com",
        "password": "s3cure-passw0rd",
        "first_name": "Nina",
        "last_name": "Newhire",
        "phone": "+34600111222",
        "role": "ADMIN",
    }
    payload.update(overrides)
    return payload


async def count_memberships(db_session, user_id) -> int:
    return await db_session.scalar(
        select(func.count())
        .select_from(Membership)
        .where(Membership.user_id == user_id)
    )


@pytest.mark.asyncio
async def test_invite_new_user_creates_user_and_membership(
    owner_client: AsyncClient, test_company, db_session
):
    response = await owner_client.post("/users", json=invite_payload())

    data = assert_success_response(
        response,
        expected_message_code=MessageCode.USER_CREATED,
        expected_status=status.HTTP_201_CREATED,
        data_assertions={
            "email": "new.hire@example.com",
            "first_name": "Nina",
            "last_name": "Newhire",
            "phone": "+34600111222",
            "role": "ADMIN",
            "company_id": str(test_company.id),
        },
    )

    user = await db_session.scalar(select(User).where(User.id == UUID(data["id"])))
    membership = await db_session.scalar(
        select(Membership).where(
            Membership.user_id == user.id, Membership.company_id == test_company.id
        )
    )
    assert membership is not None
    assert membership.role == UserRole.ADMIN
    assert user.role == UserRole.ADMIN
    assert user.default_membership_id == membership.id
    assert user.password_hash != "s3cure-passw0rd"
    assert HashingService.verify_password("s3cure-passw0rd", user.password_hash)


@pytest.mark.asyncio
async def test_invite_lowercases_email(owner_client: AsyncClient, db_session):
    response = await owner_client.post(
        "/users", json=invite_payload(email="Mixed.Case@Example.COM")
    )

    data = assert_success_response(
        response,
        expected_message_code=MessageCode.USER_CREATED,
        expected_status=status.HTTP_201_CREATED,
    )
    assert data["email"] == "mixed.case@example.com"
    stored = await db_session.scalar(
        select(User.email).where(User.id == UUID(data["id"]))
    )
    assert stored == "mixed.case@example.com"


@pytest.mark.asyncio
async def test_invite_defaults_to_picker_role(owner_client: AsyncClient):
    payload = invite_payload()
    del payload["role"]
    del payload["phone"]

    response = await owner_client.post("/users", json=payload)

    data = assert_success_response(
        response,
        expected_message_code=MessageCode.USER_CREATED,
        expected_status=status.HTTP_201_CREATED,
    )
    assert data["role"] == "PICKER"
    assert data["phone"] is None


@pytest.mark.asyncio
async def test_invite_existing_user_only_adds_membership(
    admin_client: AsyncClient, test_company, other_company, create_member, db_session
):
    """An existing account keeps its profile, password and global role."""
    existing = await create_member(
        other_company, UserRole.OWNER, first_name="Eve", last_name="Existing"
    )

    response = await admin_client.post(
        "/users",
        json=invite_payload(
            email=existing.email.upper(),
            password="another-password",
            first_name="Ignored",
            role="PICKER",
        ),
    )

    data = assert_success_response(
        response,
        expected_message_code=MessageCode.USER_ADDED_TO_COMPANY,
        expected_status=status.HTTP_201_CREATED,
    )
    assert data["id"] == str(existing.id)
    assert data["first_name"] == "Eve"
    assert data["role"] == "PICKER"
    assert data["company_id"] == str(test_company.id)

    row = (
        await db_session.execute(
            select(User.role, User.password_hash, User.default_membership_id).where(
                User.id == existing.id
            )
        )
    ).one()
    assert row.role == UserRole.OWNER
    assert HashingService.verify_password(TEST_PASSWORD, row.password_hash)
    assert row.default_membership_id == existing.default_membership_id
    assert await count_memberships(db_session, existing.id) == 2


@pytest.mark.asyncio
async def test_invite_existing_member_conflicts(
    owner_client: AsyncClient, picker_user, db_session
):
    response = await owner_client.post(
        "/users", json=invite_payload(email=picker_user.email, role="OWNER")
    )

    assert_error_response(
        response, MessageCode.USER_ALREADY_MEMBER, status.HTTP_409_CONFLICT
    )
    assert await count_memberships(db_session, picker_user.id) == 1
    role = await db_session.scalar(
        select(Membership.role).where(Membership.user_id == picker_user.id)
    )
    assert role == UserRole.PICKER


@pytest.mark.asyncio
async def test_picker_cannot_invite(picker_client: AsyncClient, db_session):
    response = await picker_client.post("/users", json=invite_payload())

    body = assert_permission_error(response)
    assert body["details"]["description"] == "Insufficient permissions to invite users"
    created = await db_session.scalar(
        select(User).where(User.email == "new.hire@example.com")
    )
    assert created is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload", [{}, {"email": "not-an-email"}, invite_payload(password="short")]
)
async def test_picker_is_forbidden_before_payload_is_validated(
    picker_client: AsyncClient, payload
):
    response = await picker_client.post("/users", json=payload)

    body = assert_permission_error(response)
    assert body["details"]["description"] == "Insufficient permissions to invite users"


@pytest.mark.asyncio
async def test_invite_rejects_invalid_payload(owner_client: AsyncClient):
    response = await owner_client.post(
        "/users",
        json=invite_payload(email="not-an-email", password="short", first_name=""),
    )

    assert_validation_error(response, fields=["email", "password", "first_name"])


@pytest.mark.asyncio
async def test_invite_rejects_short_phone(owner_client: AsyncClient):
    response = await owner_client.post("/users", json=invite_payload(phone="123"))

    assert_validation_error(response, fields=["phone"])


@pytest.mark.asyncio
async def test_invite_rejects_unknown_role(owner_client: AsyncClient):
    response = await owner_client.post("/users", json=invite_payload(role="SUPERUSER"))

    assert_validation_error(response, fields=["role"])


@pytest.mark.asyncio
async def test_invite_requires_required_fields(owner_client: AsyncClient):
    response = await owner_client.post("/users", json={"email": "a@example.com"})

    assert_validation_error(response, fields=["password", "first_name", "last_name"])
