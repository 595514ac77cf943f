import os

SECRET_KEY = "test-secret"

AGENT_CONFIG = {
    "api_base_url": os.getenv("API_BASE_URL", "http://localhost:3000"),
    "api_token": None,
    "request_timeout": 2.0,
    "sync_db_path": os.getenv("SYNC_DB_PATH", "instance/worktime-test.sqlite3"),
    "heartbeat_url": os.getenv("HEARTBEAT_URL", "http://localhost:3000/api/health"),
    "backoff_base_seconds": 1.0,
    "backoff_max_seconds": 10.0,
    "sync_interval_seconds": 1.0,
    "auto_sync": False,
    "geolocation_url": os.getenv("GEOLOCATION_URL"),
}

EMPLOYEE_ID = os.getenv("EMPLOYEE_ID", "emp-test")

LOG_LEVEL = "WARNING"

DEBUG = False
TESTING = True
