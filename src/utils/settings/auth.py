from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Shared with the token issuer; access tokens are HS256-signed with it
    JWT_ACCESS_SECRET: str = ""

    def validate_prod(self) -> None:
        if not self.JWT_ACCESS_SECRET:
            raise ValueError("JWT_ACCESS_SECRET must be set in production")
