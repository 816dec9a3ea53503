# Shared configuration, helpers, and constants for all seed modules

import os
import uuid
from pathlib import Path
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------
_script_dir = Path(__file__).resolve().parent.parent
for _env_path in [_script_dir / ".env", _script_dir.parent / ".env", Path.cwd() / ".env"]:
    if _env_path.is_file():
        load_dotenv(_env_path, override=True)
        break
else:
    load_dotenv(override=True)

# ---------------------------------------------------------------------------
# Connection strings
# ---------------------------------------------------------------------------
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DB  = os.getenv("MONGODB_DB", "grievance_desk")

# ---------------------------------------------------------------------------
# Shared clients
# ---------------------------------------------------------------------------
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def new_id() -> str:
    return str(uuid.uuid4())

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def months_back(now: datetime, months: int, day: int = 10) -> datetime:
    """Return day *day* of the month *months* before *now*, at 09:00 UTC."""
    index = now.year * 12 + (now.month - 1) - months
    return datetime(index // 12, index % 12 + 1, day, 9, 0, tzinfo=timezone.utc)

# ---------------------------------------------------------------------------
# Resolution turnaround by department (days from assignment)
# ---------------------------------------------------------------------------
RESOLUTION_DAYS = {
    "Computer Science": 4,
    "Electrical":       6,
    "Mechanical":       7,
    "Civil":            9,
    "Mathematics":      3,
    "Physics":          5,
}

def resolution_delay(department: str) -> timedelta:
    return timedelta(days=RESOLUTION_DAYS.get(department, 7))
