import os
import tempfile
from datetime import timedelta
from dotenv import load_dotenv
load_dotenv()

def _db_url():
    uri = os.getenv("DATABASE_URL", "sqlite:///educonnect.db")
    if uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    return uri

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-jwt-change")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("JWT_EXPIRES_HOURS", "12")))
    SQLALCHEMY_DATABASE_URI = _db_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False
    WTF_CSRF_TIME_LIMIT = None
    # CSRF is checked explicitly for cookie-session clients only (bearer JWT requests skip it)
    WTF_CSRF_CHECK_DEFAULT = False
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_MB", "16")) * 1024 * 1024
    CLASSROOM_CODE_MAX_ATTEMPTS = int(os.getenv("CLASSROOM_CODE_MAX_ATTEMPTS", "20"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), "educonnect-test-uploads")
    LOG_LEVEL = "DEBUG"
