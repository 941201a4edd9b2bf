"""Root conftest — shared test configuration."""

import os

# Never touch a real database or storage bucket from tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STORAGE_URL", "http://storage.test/storage/v1")
os.environ.setdefault("STORAGE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("LOG_FORMAT", "text")
