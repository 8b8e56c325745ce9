"""Application configuration."""
import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name, default="false"):
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Config:
    """Base configuration."""
    DATABASE_URL = os.environ.get('DATABASE_URL', 'mongodb://localhost:27017')
    DATABASE_NAME = os.environ.get('DATABASE_NAME', 'farm_marketplace')

    # Token signing
    JWT_SECRET = os.environ.get('JWT_SECRET') or os.environ.get('SECRET_KEY', 'dev-secret-key-change-me')
    JWT_ALGORITHM = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get('ACCESS_TOKEN_EXPIRE_MINUTES', 60 * 24))

    # Route guards are declared on every endpoint but only checked when enabled
    ENFORCE_AUTH = _flag('ENFORCE_AUTH')

    # Uploads
    UPLOAD_DIR = os.environ.get('UPLOAD_DIR', 'uploads')
    MAX_UPLOAD_BYTES = int(os.environ.get('MAX_UPLOAD_BYTES', 10 * 1024 * 1024))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', 5000))
    DEBUG = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Configuration used by the test suite."""
    DATABASE_NAME = 'farm_marketplace_test'
    JWT_SECRET = 'test-secret'
    ENFORCE_AUTH = False
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
