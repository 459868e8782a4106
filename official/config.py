from typing import Optional

from pydantic import field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .secrets_manager import SecretsManager

class Settings(BaseSettings):
    aws_region: str = "us-east-1"
    environment: str = "development"
    host: str = "localhost"
    db_username: str = "postgres"
    db_password: SecretStr = SecretStr("postgres")
    database: str = "official"
    db_port: int = 5432
    # Overrides the composed PostgreSQL URL when set (e.g. sqlite+aiosqlite for tests)
    database_url: Optional[str] = None

    jwt_secret: SecretStr = SecretStr("your-jwt-secret-key")
    jwt_algorithm: str = "HS256"
    access_token_days: int = 30

    twilio_account_sid: Optional[SecretStr] = None
    twilio_auth_token: Optional[SecretStr] = None
    twilio_phone_number: Optional[str] = None
    twilio_api_url: str = "https://api.twilio.com/2010-04-01"
    sms_timeout: float = 10.0

    invite_link_base_url: str = "https://getofficial.app/invite"
    port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("db_username", "db_password", "jwt_secret", "twilio_account_sid", "twilio_auth_token", mode="before")
    @classmethod
    def load_secrets(cls, v, info):
        if info.data.get("environment") == "production":
            try:
                secrets = SecretsManager(region_name=info.data.get("aws_region"))
                if info.field_name == "jwt_secret":
                    v = secrets.get_api_key("jwt-signing")
                elif info.field_name == "twilio_account_sid":
                    v = secrets.get_twilio_credentials()["account_sid"]
                elif info.field_name == "twilio_auth_token":
                    v = secrets.get_twilio_credentials()["auth_token"]
                elif info.field_name == "db_username":
                    v = secrets.get_db_credentials()["username"]
                elif info.field_name == "db_password":
                    v = secrets.get_db_credentials()["password"]
                return v
            except Exception:
                # Fall back to the environment value when the secret store is unreachable
                return v
        return v

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"postgresql+psycopg://{self.db_username}:{self.db_password.get_secret_value()}@{self.host}:{self.db_port}/{self.database}"

    @property
    def sms_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_phone_number)

settings = Settings()
