from decouple import config, Csv

class Settings:
    # Database Configuration
    DATABASE_URL: str = config("DATABASE_URL", default="sqlite:///./motorotas.db")

    # Security Configuration
    SECRET_KEY: str = config("SECRET_KEY", default="local-development-secret")
    JWT_ALGORITHM: str = config("JWT_ALGORITHM", default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = config("ACCESS_TOKEN_EXPIRE_MINUTES", default=720, cast=int)
    AUTH_COOKIE_NAME: str = config("AUTH_COOKIE_NAME", default="motorotas-token")
    BCRYPT_ROUNDS: int = config("BCRYPT_ROUNDS", default=10, cast=int)

    # Bootstrap admin
    DEFAULT_ADMIN_EMAIL: str = config("DEFAULT_ADMIN_EMAIL", default="admin@motorotas.com")
    DEFAULT_ADMIN_PASSWORD: str = config("DEFAULT_ADMIN_PASSWORD", default="Admin@123")

    # CORS
    ALLOWED_ORIGINS: list = config("ALLOWED_ORIGINS", default="http://localhost:3000", cast=Csv())

    # Deliveries
    LOCATION_STALE_SECONDS: int = config("LOCATION_STALE_SECONDS", default=120, cast=int)
    DELIVERY_CODE_ATTEMPTS: int = config("DELIVERY_CODE_ATTEMPTS", default=5, cast=int)

    # Environment
    ENVIRONMENT: str = config("ENVIRONMENT", default="development")

    # Logging
    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")

settings = Settings()
