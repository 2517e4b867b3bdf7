from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str | None = Field(None, description="Full SQLAlchemy URL, overrides the DB_* parts")
    db_driver: str = "mysql+pymysql"
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = "password"
    db_name: str = "technova_db"
    db_pool_size: int = 10
    db_pool_timeout: int = 30

    host: str = "0.0.0.0"
    port: int = 5000
    api_title: str = "TechNova API"
    log_level: str = "INFO"

    bcrypt_rounds: int = Field(12, ge=4, le=31)
    write_rate_limit: str = "30/minute"

    @property
    def sqlalchemy_url(self) -> str | URL:
        if self.database_url:
            return self.database_url
        return URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


settings = Settings()
