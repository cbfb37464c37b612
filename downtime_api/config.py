import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # If DB_URL is not provided, fall back to a local sqlite file for ease of local
    # development.
    DB_URL: str = os.getenv("DB_URL") or "sqlite:///./dev.db"

    PROJECT_NAME: str = os.getenv("PROJECT_NAME") or "Downtime Scheduler API"

    LOG_LEVEL: str = os.getenv("LOG_LEVEL") or "INFO"

    # How often the in-process scheduler runs the reconciliation sweep.
    # 0 disables it (use `manage_downtimes.py sweep` from cron instead).
    SWEEP_INTERVAL_MINUTES: int = int(os.getenv("SWEEP_INTERVAL_MINUTES") or 5)

    # Capacity of the audit writer's channel. Events beyond it are dropped.
    AUDIT_QUEUE_SIZE: int = int(os.getenv("AUDIT_QUEUE_SIZE") or 1000)

    DEFAULT_ACTOR: str = os.getenv("DEFAULT_ACTOR") or "System"


settings = Settings()
