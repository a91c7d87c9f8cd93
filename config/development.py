from .config import Config, db_config_from_env, env_flag

SECRET_KEY = Config.SECRET_KEY

DB_CONFIG = db_config_from_env()

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed demo data on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

DEFAULT_TIMEZONE = Config.DEFAULT_TIMEZONE
TENANT_TIMEZONES = Config.TENANT_TIMEZONES
LOG_LEVEL = "DEBUG" if Config.LOG_LEVEL == "INFO" else Config.LOG_LEVEL
