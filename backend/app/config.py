"""Runtime configuration read from the environment (and an optional ``.env``)."""

import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_int(raw_value: Optional[str]) -> Optional[int]:
    if raw_value is None or not raw_value.strip():
        return None
    return int(raw_value)


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
ANALYSIS_DELAY_SECONDS = float(os.getenv("ANALYSIS_DELAY_SECONDS", "2.0"))
ANALYSIS_SEED = _optional_int(os.getenv("ANALYSIS_SEED"))
REPORT_TTL_SECONDS = int(os.getenv("REPORT_TTL_SECONDS", str(6 * 3600)))

CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
