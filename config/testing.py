from .config import db_config_from_env, env_flag

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_name="workforce_test_db")

DEBUG = False
TESTING = True

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

DEFAULT_TIMEZONE = "UTC"
TENANT_TIMEZONES = ""
LOG_LEVEL = "WARNING"
