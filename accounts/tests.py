from types import SimpleNamespace

import jwt
from django.contrib.auth import get_user_model
from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from .tokens import TokenIssuer, create_token

SECRET = "test-secret-key-with-enough-length-for-hs256"


def decode(token, secret=SECRET):
    return jwt.decode(token, secret, algorithms=["HS256"])


class TokenIssuerTests(SimpleTestCase):

    def test_payload_holds_only_id_and_username(self):
        user = {
            "user_id": 7,
            "username": "ada",
            "password": "hashed",
            "email": "ada@example.com",
            "is_admin": True,
        }

        token = TokenIssuer(SECRET).issue(user)

        self.assertEqual(decode(token), {"user_id": 7, "username": "ada"})

    def test_accepts_objects(self):
        user = SimpleNamespace(user_id=3, username="grace", first_name="Grace")

        payload = jwt.decode(
            TokenIssuer(SECRET).issue(user), options={"verify_signature": False}
        )

        self.assertEqual(set(payload), {"user_id", "username"})
        self.assertEqual(payload["username"], "grace")

    def test_no_expiry_claim(self):
        payload = decode(TokenIssuer(SECRET).issue({"user_id": 1, "username": "a"}))
        self.assertNotIn("exp", payload)

    def test_signed_with_given_secret(self):
        token = TokenIssuer(SECRET).issue({"user_id": 1, "username": "a"})
        with self.assertRaises(jwt.InvalidSignatureError):
            decode(token, secret="some-other-secret-of-similar-length-000")

    def test_blank_secret_is_a_configuration_error(self):
        for secret in (None, "", "   "):
            with self.assertRaises(ImproperlyConfigured):
                TokenIssuer(secret)

    @override_settings(JWT_SECRET_KEY=SECRET, JWT_ALGORITHM="HS256")
    def test_create_token_uses_settings(self):
        token = create_token({"user_id": 9, "username": "linus"})
        self.assertEqual(decode(token), {"user_id": 9, "username": "linus"})

    @override_settings(JWT_SECRET_KEY="")
    def test_create_token_without_secret(self):
        with self.assertRaises(ImproperlyConfigured):
            create_token({"user_id": 9, "username": "linus"})


@override_settings(JWT_SECRET_KEY=SECRET, JWT_ALGORITHM="HS256")
class AuthViewTests(APITestCase):

    def test_register_returns_token(self):
        resp = self.client.post(
            "/auth/register",
            {"username": "ada", "password": "correct-horse", "email": "ada@example.com"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        user = get_user_model().objects.get(username="ada")
        self.assertEqual(decode(resp.data["token"]), {"user_id": user.pk, "username": "ada"})
        self.assertTrue(user.check_password("correct-horse"))

    def test_register_rejects_duplicate_username(self):
        get_user_model().objects.create_user(username="ada", password="correct-horse")

        resp = self.client.post(
            "/auth/register", {"username": "ADA", "password": "correct-horse"}, format="json"
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("username", resp.data["details"])

    def test_register_rejects_short_password(self):
        resp = self.client.post(
            "/auth/register", {"username": "ada", "password": "short"}, format="json"
        )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", resp.data["details"])

    def test_login_returns_token(self):
        user = get_user_model().objects.create_user(username="grace", password="correct-horse")

        resp = self.client.post(
            "/auth/token", {"username": "grace", "password": "correct-horse"}, format="json"
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(decode(resp.data["token"]), {"user_id": user.pk, "username": "grace"})

    def test_login_bad_password(self):
        get_user_model().objects.create_user(username="grace", password="correct-horse")

        resp = self.client.post(
            "/auth/token", {"username": "grace", "password": "wrong-horse"}, format="json"
        )

        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertNotIn("token", resp.data)

    def test_login_missing_fields(self):
        resp = self.client.post("/auth/token", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
