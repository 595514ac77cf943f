import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

AGENT_CONFIG = {
    "api_base_url": os.getenv("API_BASE_URL", "http://localhost:3000"),
    "api_token": os.getenv("API_TOKEN"),
    "request_timeout": float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10")),
    "sync_db_path": os.getenv("SYNC_DB_PATH", "instance/worktime-dev.sqlite3"),
    "heartbeat_url": os.getenv("HEARTBEAT_URL", "http://localhost:3000/api/health"),
    "backoff_base_seconds": float(os.getenv("SYNC_BACKOFF_BASE_SECONDS", "30")),
    "backoff_max_seconds": float(os.getenv("SYNC_BACKOFF_MAX_SECONDS", "1800")),
    "sync_interval_seconds": float(os.getenv("SYNC_INTERVAL_SECONDS", "60")),
    "auto_sync": bool(int(os.getenv("AUTO_SYNC", "1"))),
    "geolocation_url": os.getenv("GEOLOCATION_URL"),
}

# Employee this agent tracks when a request does not name one
EMPLOYEE_ID = os.getenv("EMPLOYEE_ID")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

DEBUG = True
