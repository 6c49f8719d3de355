"""
API tests for the user controller.
"""

import uuid

import pytest
from fastapi import status
from httpx import AsyncClient


class TestUserController:
    """Test cases for /users endpoints."""

    @pytest.mark.asyncio
    async def test_create_user_success(self, client: AsyncClient):
        """Test successful registration."""
        response = await client.post(
            "/users", json={"email": "bob@dylan.com", "password": "toto1234!"}
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "success"
        assert data["data"]["email"] == "bob@dylan.com"
        assert data["data"]["id"]
        assert "password" not in data["data"]
        assert "password_hash" not in data["data"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"password": "toto1234!"}, "Missing email"),
            ({"email": "", "password": "toto1234!"}, "Missing email"),
            ({"email": "bob@dylan.com"}, "Missing password"),
            ({}, "Missing email"),
        ],
    )
    async def test_create_user_missing_fields(self, client: AsyncClient, payload, message):
        response = await client.post("/users", json=payload)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == message

    @pytest.mark.asyncio
    async def test_create_user_password_too_long(self, client: AsyncClient):
        """Test passwords bcrypt cannot hash are rejected."""
        response = await client.post(
            "/users", json={"email": "bob@dylan.com", "password": "p" * 80}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Password too long"

    @pytest.mark.asyncio
    async def test_create_user_longest_password(self, client: AsyncClient):
        password = "\u00e9" * 36

        response = await client.post("/users", json={"email": "bob@dylan.com", "password": password})

        assert response.status_code == status.HTTP_201_CREATED

    @pytest.mark.asyncio
    async def test_create_user_duplicate(self, client: AsyncClient, test_user):
        """Test registering an email twice."""
        response = await client.post(
            "/users", json={"email": test_user.email, "password": "other"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Already exist"

    @pytest.mark.asyncio
    async def test_get_me(self, client: AsyncClient, test_user, auth_headers):
        response = await client.get("/users/me", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["id"] == str(test_user.id)
        assert data["email"] == test_user.email

    @pytest.mark.asyncio
    async def test_get_me_unauthorized(self, client: AsyncClient):
        response = await client.get("/users/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_get_me_invalid_token(self, client: AsyncClient):
        response = await client.get("/users/me", headers={"X-Token": "invalid"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["message"] == "Unauthorized"

    @pytest.mark.asyncio
    async def test_get_me_for_deleted_user(self, client: AsyncClient, credential_cache):
        """Test a session whose user no longer exists is rejected."""
        token = await credential_cache.issue(uuid.uuid4())

        response = await client.get("/users/me", headers={"X-Token": token})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
