import os
import threading

_DEFAULTS_FILE = os.path.join(os.path.dirname(__file__), "data", "access-defaults.yaml")


class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE", "development")
        self.DATABASE_URL = os.environ.get("DATABASE_URL", None)
        self.POSTGRES_URL = os.environ.get("POSTGRES_URL", "localhost:5432")
        self.POSTGRES_USER = os.environ.get("POSTGRES_USER", "postgres")
        self.POSTGRES_PASSWORD = os.environ.get("POSTGRES_PASSWORD", "")
        self.POSTGRES_DB = os.environ.get("POSTGRES_DB", "dare")
        # Access control settings
        self.ADMIN_ROLE_NAME = os.environ.get("ADMIN_ROLE_NAME", "admin")
        self.ACCESS_DEFAULTS_FILE = os.environ.get("ACCESS_DEFAULTS_FILE", _DEFAULTS_FILE)
        self.RESOLVE_TIMEOUT_MS = int(os.environ.get("RESOLVE_TIMEOUT_MS", "2000"))

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_URL}/{self.POSTGRES_DB}"

settings = BackendSettings()
