"""
Test Case Suite: Password Recovery
Test ID Range: TC-017 to TC-028

Forgot-password → verify-otp → reset-password, including expiry and replay.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.user import User
from app.utils.security import create_reset_token, verify_password
from tests.conftest import create_user, DEFAULT_PASSWORD


async def request_otp(client: AsyncClient, email: str) -> str:
    """Trigger forgot-password and capture the emailed code"""
    with patch("app.services.auth_service.send_otp_email", new=AsyncMock(return_value=True)) as sender:
        response = await client.post("/api/auth/forgot-password", json={"email": email})
    assert response.status_code == 200, response.text
    sender.assert_awaited_once()
    return sender.await_args.args[1]


async def reload_user(db_session, user_id: str) -> User:
    result = await db_session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one()
    await db_session.refresh(user)
    return user


class TestForgotPassword:
    @pytest.mark.asyncio
    async def test_tc017_forgot_password_stores_hashed_code(self, client: AsyncClient, db_session):
        """TC-017: A 6-digit code is emailed, only its hash is stored, and the response hides it"""
        user = await create_user(db_session)

        with patch("app.services.auth_service.send_otp_email", new=AsyncMock(return_value=True)) as sender:
            response = await client.post("/api/auth/forgot-password", json={"email": user.email})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "OTP sent to email"}
        otp = sender.await_args.args[1]
        assert len(otp) == 6 and otp.isdigit()
        assert otp not in response.text

        stored = await reload_user(db_session, user.id)
        assert stored.otp_hash and stored.otp_hash != otp
        assert verify_password(otp, stored.otp_hash)
        assert stored.otp_expires is not None

    @pytest.mark.asyncio
    async def test_tc018_forgot_password_unknown_email(self, client: AsyncClient):
        """TC-018: Unknown email is reported as not found"""
        response = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_tc019_forgot_password_delivery_failure(self, client: AsyncClient, db_session):
        """TC-019: A failed email delivery surfaces as an internal error"""
        user = await create_user(db_session)

        with patch("app.services.auth_service.send_otp_email", new=AsyncMock(return_value=False)):
            response = await client.post("/api/auth/forgot-password", json={"email": user.email})

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to send OTP"}

    @pytest.mark.asyncio
    async def test_tc020_new_request_replaces_old_code(self, client: AsyncClient, db_session):
        """TC-020: Only the most recent code is live"""
        user = await create_user(db_session)
        first = await request_otp(client, user.email)
        second = await request_otp(client, user.email)

        if first != second:
            stale = await client.post("/api/auth/verify-otp", json={"email": user.email, "otp": first})
            assert stale.status_code == 400

        fresh = await client.post("/api/auth/verify-otp", json={"email": user.email, "otp": second})
        assert fresh.status_code == 200


class TestVerifyOtp:
    @pytest.mark.asyncio
    async def test_tc021_verify_otp_issues_reset_token(self, client: AsyncClient, db_session):
        """TC-021: A correct code yields a reset token"""
        user = await create_user(db_session)
        otp = await request_otp(client, user.email)

        response = await client.post("/api/auth/verify-otp", json={"email": user.email, "otp": otp})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert len(data["data"]["resetToken"].split(".")) == 3

    @pytest.mark.asyncio
    async def test_tc022_verify_otp_wrong_code(self, client: AsyncClient, db_session):
        """TC-022: A wrong code is rejected"""
        user = await create_user(db_session)
        otp = await request_otp(client, user.email)
        wrong = "000000" if otp != "000000" else "111111"

        response = await client.post("/api/auth/verify-otp", json={"email": user.email, "otp": wrong})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid OTP"

    @pytest.mark.asyncio
    async def test_tc023_verify_otp_expired_code(self, client: AsyncClient, db_session):
        """TC-023: A code older than one hour is rejected even if correct"""
        user = await create_user(db_session)
        otp = await request_otp(client, user.email)

        stored = await reload_user(db_session, user.id)
        stored.otp_expires = datetime.now(timezone.utc) - timedelta(minutes=1)
        await db_session.commit()

        response = await client.post("/api/auth/verify-otp", json={"email": user.email, "otp": otp})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or expired OTP"

    @pytest.mark.asyncio
    async def test_tc024_verify_otp_without_pending_code(self, client: AsyncClient, db_session):
        """TC-024: Without a forgot-password request there is nothing to verify"""
        user = await create_user(db_session)

        response = await client.post("/api/auth/verify-otp", json={"email": user.email, "otp": "123456"})

        assert response.status_code == 400


class TestResetPassword:
    @pytest.mark.asyncio
    async def test_tc025_full_reset_flow(self, client: AsyncClient, db_session):
        """TC-025: Reset stores the new password, clears the code, and cannot be replayed"""
        user = await create_user(db_session)
        otp = await request_otp(client, user.email)
        verify = await client.post("/api/auth/verify-otp", json={"email": user.email, "otp": otp})
        reset_token = verify.json()["data"]["resetToken"]

        response = await client.post(
            "/api/auth/reset-password",
            json={"email": user.email, "resetToken": reset_token, "newPassword": "newsecret"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Password reset successfully"}

        stored = await reload_user(db_session, user.id)
        assert stored.otp_hash is None
        assert stored.otp_expires is None

        old_login = await client.post("/api/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
        new_login = await client.post("/api/auth/login", json={"email": user.email, "password": "newsecret"})
        assert old_login.status_code == 403
        assert new_login.status_code == 200

        replay = await client.post(
            "/api/auth/reset-password",
            json={"email": user.email, "resetToken": reset_token, "newPassword": "another1"},
        )
        assert replay.status_code == 403

    @pytest.mark.asyncio
    async def test_tc026_reset_token_email_mismatch(self, client: AsyncClient, db_session):
        """TC-026: A validly signed token for another email is rejected"""
        user = await create_user(db_session)
        await request_otp(client, user.email)
        foreign_token = create_reset_token("someone.else@example.com")

        response = await client.post(
            "/api/auth/reset-password",
            json={"email": user.email, "resetToken": foreign_token, "newPassword": "newsecret"},
        )

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "Invalid token"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body, status_code",
        [
            ({"resetToken": "x", "newPassword": "newsecret"}, 400),
            ({"email": "a@x.com", "resetToken": "not.a.jwt", "newPassword": "newsecret"}, 403),
            ({"email": "a@x.com", "resetToken": "x", "newPassword": "abc"}, 400),
        ],
    )
    async def test_tc027_reset_password_bad_input(self, client: AsyncClient, body, status_code):
        """TC-027: Missing fields, short passwords and broken tokens are rejected"""
        response = await client.post("/api/auth/reset-password", json=body)

        assert response.status_code == status_code
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_tc028_reset_for_deleted_user(self, client: AsyncClient):
        """TC-028: A valid token for a user that no longer exists is not found"""
        token = create_reset_token("gone@example.com")

        response = await client.post(
            "/api/auth/reset-password",
            json={"email": "gone@example.com", "resetToken": token, "newPassword": "newsecret"},
        )

        assert response.status_code == 404
