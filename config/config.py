import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.environ.get(name, default)))


def db_config_from_env(*, default_name: str = "workforce_db") -> dict:
    return {
        "host": os.environ.get("DB_HOST", "localhost"),
        "port": int(os.environ.get("DB_PORT", "3306")),
        "user": os.environ.get("DB_USER", "root"),
        "password": os.environ.get("DB_PASSWORD", ""),
        "database": os.environ.get("DB_NAME", default_name),
    }


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "workforce-engine-secret"

    # Wall-clock zone used for tenants without an explicit entry.
    DEFAULT_TIMEZONE = os.environ.get("DEFAULT_TIMEZONE", "UTC")
    # "1=Asia/Kolkata,2=UTC"
    TENANT_TIMEZONES = os.environ.get("TENANT_TIMEZONES", "")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
