# backend/tests/test_settings.py

import importlib
import os
import sys
from unittest import mock

from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase

PROD_MODULE = "backend.settings.prod"

PROD_ENV = {
    "SECRET_KEY": "a-long-production-secret",
    "ALLOWED_HOSTS": "pos.example.com",
    "DATABASE_URL": "postgres://pos:pw@db:5432/pos",
    "CORS_ALLOWED_ORIGINS": "https://till.example.com",
    "CSRF_TRUSTED_ORIGINS": "https://till.example.com",
}


def _load_prod(**overrides):
    sys.modules.pop(PROD_MODULE, None)
    try:
        with mock.patch.dict(os.environ, {**PROD_ENV, **overrides}):
            return importlib.import_module(PROD_MODULE)
    finally:
        sys.modules.pop(PROD_MODULE, None)


class ProductionSettingsTests(SimpleTestCase):
    """
    GUARANTEES:
    - Production refuses to start on a missing secret, sqlite or http origins
    - whitenoise sits right after SecurityMiddleware
    """

    def test_complete_environment_loads(self):
        prod = _load_prod()

        self.assertFalse(prod.DEBUG)
        self.assertEqual(prod.DATABASES["default"]["NAME"], "pos")
        self.assertTrue(prod.SESSION_COOKIE_SECURE)
        self.assertTrue(prod.CORS_ALLOW_CREDENTIALS)

        security = prod.MIDDLEWARE.index("django.middleware.security.SecurityMiddleware")
        self.assertEqual(prod.MIDDLEWARE[security + 1], "whitenoise.middleware.WhiteNoiseMiddleware")

    def test_base_middleware_is_not_mutated(self):
        from backend.settings import base

        _load_prod()

        self.assertNotIn("whitenoise.middleware.WhiteNoiseMiddleware", base.MIDDLEWARE)

    def test_sqlite_is_refused(self):
        with self.assertRaises(ImproperlyConfigured):
            _load_prod(DATABASE_URL="sqlite:///db.sqlite3")

    def test_dev_secret_is_refused(self):
        with self.assertRaises(ImproperlyConfigured):
            _load_prod(SECRET_KEY="dev-insecure-change-me")

    def test_http_origin_is_refused(self):
        with self.assertRaises(ImproperlyConfigured):
            _load_prod(CSRF_TRUSTED_ORIGINS="http://till.example.com")
