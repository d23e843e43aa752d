import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES", 43200))  # 12 hours, one shift

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

    # Postal code (CEP) lookup, best effort
    POSTAL_CODE_LOOKUP_URL = os.getenv("POSTAL_CODE_LOOKUP_URL", "https://viacep.com.br/ws/{code}/json/")
    POSTAL_CODE_LOOKUP_TIMEOUT = float(os.getenv("POSTAL_CODE_LOOKUP_TIMEOUT", 5))

    # Pagination
    DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", 50))
    MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", 200))


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "test-jwt-secret-key-for-testing-only"
    SECRET_KEY = "test-secret-key-for-testing-only"
    JWT_ACCESS_TOKEN_EXPIRES = 3600
    POSTAL_CODE_LOOKUP_URL = "https://postal.invalid/ws/{code}/json/"
    POSTAL_CODE_LOOKUP_TIMEOUT = 1


class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig
}
