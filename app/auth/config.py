from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthConfig(BaseSettings):
    # Tokens are issued by the identity service; this side only verifies them.
    secret: str = "fooddupe-dev-secret"  # 🔐 override with JWT_SECRET outside development
    algorithm: str = "HS256"
    audience: str = "fooddupe:staff"
    leeway_seconds: int = 10

    model_config = SettingsConfigDict(env_file=".env", env_prefix="JWT_", extra="ignore")


auth_config = AuthConfig()
