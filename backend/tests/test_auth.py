import hashlib
from datetime import timedelta

from sqlalchemy import select

from authorhaven.auth.models import BlacklistToken
from authorhaven.auth.oauth import SocialProfile
from authorhaven.users import service as user_service
from authorhaven.users.models import User

NEW_USER = {"username": "berra", "email": "checka@tests.com", "password": "testtest4"}


async def _signup_and_activate(client, db, payload=NEW_USER):
    res = await client.post("/auth/signup", json=payload)
    assert res.status_code == 201
    user = await user_service.get_user_by_email(payload["email"], db)
    res = await client.get(f"/activate/{user.id}")
    assert res.status_code == 200
    return user


class TestPasswordHashing:
    def test_matches_pbkdf2_sha512_1000_rounds_64_bytes(self):
        salt = "a" * 32
        expected = hashlib.pbkdf2_hmac("sha512", b"testtest4", salt.encode(), 1000, 64).hex()
        assert user_service.hash_password("testtest4", salt) == expected

    def test_each_credential_gets_its_own_salt(self):
        salt1, hash1 = user_service.make_credentials("testtest4")
        salt2, hash2 = user_service.make_credentials("testtest4")
        assert salt1 != salt2
        assert hash1 != hash2
        assert len(hash1) == 128

    def test_verify_password(self):
        salt, hashed = user_service.make_credentials("testtest4")
        assert user_service.verify_password("testtest4", salt, hashed)
        assert not user_service.verify_password("tessttest4", salt, hashed)
        assert not user_service.verify_password("testtest4", None, None)


class TestSignup:
    async def test_signup_creates_user_and_sends_activation(self, client, db, mailer):
        res = await client.post("/auth/signup", json=NEW_USER)
        assert res.status_code == 201
        body = res.json()
        assert body["user"] == {"email": "checka@tests.com", "username": "berra"}

        user = await user_service.get_user_by_email("checka@tests.com", db)
        assert user.activated is False
        assert user.hash != NEW_USER["password"]
        assert user.salt
        assert mailer.activations == [{"name": "berra", "user_id": user.id, "email": "checka@tests.com"}]

    async def test_duplicate_email_is_rejected_once(self, client, db):
        first = await client.post("/auth/signup", json=NEW_USER)
        second = await client.post("/auth/signup", json={**NEW_USER, "username": "other"})
        assert first.status_code == 201
        assert second.status_code == 400
        assert second.json()["message"] == "the user with that email exists"

        rows = (await db.execute(select(User).where(User.email == NEW_USER["email"]))).scalars().all()
        assert len(rows) == 1

    async def test_invalid_body_is_bad_request(self, client):
        res = await client.post("/auth/signup", json={"email": "not-an-email", "username": "x", "password": "short"})
        assert res.status_code == 400
        assert "message" in res.json()

    async def test_blank_username_is_rejected(self, client, db):
        res = await client.post("/auth/signup", json={**NEW_USER, "username": "   "})
        assert res.status_code == 400
        assert "username" in res.json()["message"]
        assert await user_service.get_user_by_email(NEW_USER["email"], db) is None

    async def test_username_is_stored_stripped(self, client, db):
        res = await client.post("/auth/signup", json={**NEW_USER, "username": "  berra  "})
        assert res.status_code == 201
        assert res.json()["user"]["username"] == "berra"

class TestLogin:
    async def test_not_activated_is_rejected(self, client):
        await client.post("/auth/signup", json=NEW_USER)
        res = await client.post("/auth/login", json={"email": NEW_USER["email"], "password": NEW_USER["password"]})
        assert res.status_code == 400
        assert res.json()["message"] == "The account with email checka@tests.com is not activated"

    async def test_wrong_password(self, client, db):
        await _signup_and_activate(client, db)
        res = await client.post("/auth/login", json={"email": NEW_USER["email"], "password": "tessttest4"})
        assert res.status_code == 400
        assert res.json()["message"] == "The password is not correct"

    async def test_unknown_email(self, client):
        res = await client.post("/auth/login", json={"email": "nobody@tests.com", "password": "testtest4"})
        assert res.status_code == 404

    async def test_activated_login_issues_one_hour_token(self, client, db, tokens):
        user = await _signup_and_activate(client, db)
        res = await client.post("/auth/login", json={"email": NEW_USER["email"], "password": NEW_USER["password"]})
        assert res.status_code == 200
        token = res.json()["user"]["token"]

        claims = tokens.verify(token)
        assert claims["id"] == user.id
        assert claims["email"] == NEW_USER["email"]
        assert claims["type"] == "access"

        me = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["username"] == "berra"

    async def test_activation_is_idempotent(self, client, db):
        user = await _signup_and_activate(client, db)
        res = await client.get(f"/activate/{user.id}")
        assert res.status_code == 200
        assert user.activated is True

    async def test_activate_unknown_user(self, client):
        res = await client.get("/activate/999")
        assert res.status_code == 404


class TestLogout:
    async def test_logout_revokes_token(self, client, db, make_user):
        _, headers = await make_user()
        res = await client.post("/auth/logout", headers=headers)
        assert res.status_code == 200

        stored = (await db.execute(select(BlacklistToken))).scalars().all()
        assert len(stored) == 1
        assert stored[0].token == headers["Authorization"].split(" ")[1]

        again = await client.get("/users/me", headers=headers)
        assert again.status_code == 401

    async def test_logout_requires_token(self, client):
        res = await client.post("/auth/logout")
        assert res.status_code == 401

    async def test_other_sessions_stay_valid(self, client, make_user, tokens):
        user, headers = await make_user()
        other = tokens.create_access_token(user_id=user.id, email=user.email)
        await client.post("/auth/logout", headers=headers)
        res = await client.get("/users/me", headers={"Authorization": f"Bearer {other}"})
        assert res.status_code == 200

    async def test_purge_keeps_unexpired_tokens(self, db, make_user, tokens):
        from authorhaven.auth import service as auth_service

        _, headers = await make_user()
        await auth_service.logout(db, tokens, headers["Authorization"].split(" ")[1])
        assert await auth_service.purge_expired_tokens(db) == 0


class TestPasswordReset:
    async def test_unknown_email(self, client):
        res = await client.post("/users/reset", json={"email": "fridolinho@gmail.com"})
        assert res.status_code == 404

    async def test_full_reset_flow(self, client, db, mailer, make_user):
        await make_user(email="checka@tests.com")
        res = await client.post("/users/reset", json={"email": "checka@tests.com"})
        assert res.status_code == 200
        assert len(mailer.resets) == 1
        token = mailer.resets[0]["token"]

        mismatch = await client.post(f"/update_password/{token}", json={"password": "newpass123", "password2": "newpass124"})
        assert mismatch.status_code == 400
        assert mismatch.json()["message"] == "password not matching"

        res = await client.post(f"/update_password/{token}", json={"password": "newpass123", "password2": "newpass123"})
        assert res.status_code == 200

        old = await client.post("/auth/login", json={"email": "checka@tests.com", "password": "testtest4"})
        assert old.status_code == 400
        new = await client.post("/auth/login", json={"email": "checka@tests.com", "password": "newpass123"})
        assert new.status_code == 200

    async def test_invalid_token(self, client, make_user):
        await make_user()
        res = await client.post("/update_password/not-a-token", json={"password": "newpass123", "password2": "newpass123"})
        assert res.status_code == 404

    async def test_expired_token(self, client, make_user, tokens):
        await make_user(email="checka@tests.com")
        expired = tokens.sign({"email": "checka@tests.com", "type": "reset"}, timedelta(seconds=-10))
        res = await client.post(f"/update_password/{expired}", json={"password": "newpass123", "password2": "newpass123"})
        assert res.status_code == 404

    async def test_access_token_cannot_reset(self, client, make_user):
        _, headers = await make_user()
        access = headers["Authorization"].split(" ")[1]
        res = await client.post(f"/update_password/{access}", json={"password": "newpass123", "password2": "newpass123"})
        assert res.status_code == 404


class TestSocialLogin:
    async def test_first_login_creates_account(self, client, db, oauth_client, mailer, tokens):
        oauth_client.profiles[("google", "g-token")] = SocialProfile(
            id="1234", display_name="Jane Doe", provider="google", emails=["jane@gmail.com"]
        )
        res = await client.post("/oauth/google", json={"access_token": "g-token"})
        assert res.status_code == 201
        body = res.json()
        assert body["data"]["provider"] == "google"
        assert tokens.verify(body["token"])["email"] == "jane@gmail.com"

        user = await user_service.get_user_by_email("jane@gmail.com", db)
        assert user.hash is None and user.salt is None
        assert mailer.activations[0]["email"] == "jane@gmail.com"

        again = await client.post("/oauth/google", json={"access_token": "g-token"})
        assert again.status_code == 200
        assert again.json()["data"]["id"] == user.id

    async def test_email_taken_by_local_account(self, client, oauth_client, make_user):
        await make_user(email="jane@gmail.com")
        oauth_client.profiles[("facebook", "fb")] = SocialProfile(
            id="99", display_name="Jane", provider="facebook", emails=["jane@gmail.com"]
        )
        res = await client.post("/oauth/facebook", json={"access_token": "fb"})
        assert res.status_code == 400

    async def test_rejected_provider_token(self, client):
        res = await client.post("/oauth/google", json={"access_token": "bogus"})
        assert res.status_code == 401

    async def test_social_account_has_no_password_login(self, client, oauth_client, db):
        oauth_client.profiles[("google", "g")] = SocialProfile(
            id="1", display_name="Sam", provider="google", emails=["sam@gmail.com"]
        )
        await client.post("/oauth/google", json={"access_token": "g"})
        user = await user_service.get_user_by_email("sam@gmail.com", db)
        await user_service.activate_user(user.id, db)
        res = await client.post("/auth/login", json={"email": "sam@gmail.com", "password": "anything1"})
        assert res.status_code == 400

    async def test_fallback_username_collision_is_rejected(self, client, db, oauth_client, make_user):
        await make_user(username="Jane")
        await make_user(username="Jane-99")
        oauth_client.profiles[("google", "g")] = SocialProfile(
            id="99", display_name="Jane", provider="google", emails=["jane@gmail.com"]
        )

        res = await client.post("/oauth/google", json={"access_token": "g"})
        assert res.status_code == 400
        assert "Jane-99" in res.json()["message"]
        assert await user_service.get_user_by_email("jane@gmail.com", db) is None
