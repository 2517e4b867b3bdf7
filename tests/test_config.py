from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from technova.config import Settings

ROOT = Path(__file__).resolve().parents[1]


def test_database_url_built_from_parts(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_USER", "technova")
    monkeypatch.setenv("DB_PASSWORD", "s3cret")
    monkeypatch.setenv("DB_NAME", "registry")
    monkeypatch.setenv("PORT", "8080")

    settings = Settings(_env_file=None)

    url = settings.sqlalchemy_url
    assert url.drivername == "mysql+pymysql"
    assert url.host == "db.internal"
    assert url.username == "technova"
    assert url.password == "s3cret"
    assert url.database == "registry"
    assert settings.port == 8080


def test_defaults(monkeypatch):
    for name in ("DATABASE_URL", "DB_HOST", "DB_NAME", "PORT", "BCRYPT_ROUNDS", "DB_POOL_SIZE"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.sqlalchemy_url.host == "localhost"
    assert settings.sqlalchemy_url.database == "technova_db"
    assert settings.port == 5000
    assert settings.bcrypt_rounds == 12
    assert settings.db_pool_size == 10


def test_database_url_overrides_parts(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///registry.db")
    assert Settings(_env_file=None).sqlalchemy_url == "sqlite:///registry.db"


def test_migration_creates_users_table(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = Config()
    config.set_main_option("script_location", str(ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", db_url)

    command.upgrade(config, "head")

    engine = create_engine(db_url)
    inspector = inspect(engine)
    columns = {column["name"] for column in inspector.get_columns("users")}
    assert columns == {
        "id", "name", "email", "password", "phone", "role", "skills", "created_at", "updated_at",
    }
    unique_indexes = [ix["column_names"] for ix in inspector.get_indexes("users") if ix["unique"]]
    assert ["email"] in unique_indexes

    command.downgrade(config, "base")
    assert "users" not in inspect(engine).get_table_names()
    engine.dispose()
