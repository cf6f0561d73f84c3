import os
from pathlib import Path


DATABASE_URL = os.environ.get("SEAT_ALLOCATOR_DATABASE_URL", "sqlite:///./seat_allocator.db")

# persistence service used by the CLI client
API_BASE_URL = os.environ.get("SEAT_ALLOCATOR_API_URL", "http://localhost:8080/api")
REQUEST_TIMEOUT = float(os.environ.get("SEAT_ALLOCATOR_TIMEOUT", "10"))
RETRY_ATTEMPTS = int(os.environ.get("SEAT_ALLOCATOR_RETRIES", "3"))
RETRY_BASE_DELAY = float(os.environ.get("SEAT_ALLOCATOR_RETRY_DELAY", "2.0"))

SNAPSHOT_PATH = os.environ.get("SEAT_ALLOCATOR_SNAPSHOT", "seating_snapshot.json")
SNAPSHOT_KEY = "examSeatingData"

EXPORT_DIR = Path(
    os.environ.get("SEAT_ALLOCATOR_EXPORT_DIR", Path(__file__).resolve().parent / "exports")
)

LOG_LEVEL = os.environ.get("SEAT_ALLOCATOR_LOG_LEVEL", "INFO")

DEFAULT_COLUMNS = 5
CSV_DELIMITER = ","
