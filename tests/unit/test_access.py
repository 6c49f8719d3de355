"""
Unit tests for authentication and file access rules.
"""

import uuid

import pytest

from app.domains.auth.access import (
    Intent,
    authenticate,
    authorize,
    ensure_readable,
    ensure_writable,
)
from app.exceptions.base import ForbiddenError, NotFoundError, UnauthenticatedError
from tests.factories import FileFactory


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def other_id():
    return uuid.uuid4()


class TestAuthenticate:
    """Test cases for authenticate."""

    @pytest.mark.asyncio
    async def test_valid_token(self, credential_cache, owner_id):
        token = await credential_cache.issue(owner_id)

        assert await authenticate(credential_cache, token) == owner_id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "unknown"])
    async def test_invalid_token(self, credential_cache, token):
        with pytest.raises(UnauthenticatedError) as exc_info:
            await authenticate(credential_cache, token)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_revoked_token(self, credential_cache, owner_id):
        token = await credential_cache.issue(owner_id)
        await credential_cache.revoke(token)

        with pytest.raises(UnauthenticatedError):
            await authenticate(credential_cache, token)


class TestAuthorize:
    """Test cases for authorize."""

    @pytest.mark.parametrize(
        "is_public, requester, intent, expected",
        [
            (False, "owner", Intent.read, True),
            (False, "owner", Intent.write, True),
            (True, "owner", Intent.read, True),
            (True, "owner", Intent.write, True),
            (False, "other", Intent.read, False),
            (False, "other", Intent.write, False),
            (True, "other", Intent.read, True),
            (True, "other", Intent.write, False),
            (False, "anonymous", Intent.read, False),
            (True, "anonymous", Intent.read, True),
            (True, "anonymous", Intent.write, False),
        ],
    )
    def test_rules(self, owner_id, other_id, is_public, requester, intent, expected):
        record = FileFactory.build(user_id=owner_id, is_public=is_public)
        user_id = {"owner": owner_id, "other": other_id, "anonymous": None}[requester]

        assert authorize(user_id, record, intent) is expected


class TestEnsureAccess:
    """Test cases for ensure_readable and ensure_writable."""

    def test_readable_returns_record(self, owner_id):
        record = FileFactory.build(user_id=owner_id)

        assert ensure_readable(owner_id, record) is record

    def test_missing_record_is_not_found(self, owner_id):
        with pytest.raises(NotFoundError):
            ensure_readable(owner_id, None)
        with pytest.raises(NotFoundError):
            ensure_writable(owner_id, None)

    def test_private_record_of_other_user_is_not_found(self, owner_id, other_id):
        record = FileFactory.build(user_id=owner_id, is_public=False)

        with pytest.raises(NotFoundError):
            ensure_readable(other_id, record)

    def test_write_private_record_of_other_user_is_not_found(self, owner_id, other_id):
        """Test a non-owner cannot learn that a private file exists."""
        record = FileFactory.build(user_id=owner_id, is_public=False)

        with pytest.raises(NotFoundError):
            ensure_writable(other_id, record)

    def test_write_public_record_of_other_user_is_forbidden(self, owner_id, other_id):
        record = FileFactory.build(user_id=owner_id, is_public=True)

        with pytest.raises(ForbiddenError) as exc_info:
            ensure_writable(other_id, record)

        assert exc_info.value.status_code == 403

    def test_owner_can_write(self, owner_id):
        record = FileFactory.build(user_id=owner_id)

        assert ensure_writable(owner_id, record) is record
