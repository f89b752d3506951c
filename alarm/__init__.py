"""Alarm module for scheduled wake-up tones and challenges."""

import os
from pathlib import Path

# Base paths
ALARM_DIR = Path(__file__).parent
PROJECT_DIR = ALARM_DIR.parent
DATA_DIR = Path(os.environ.get("MORNING_ROUTINE_DATA_DIR", PROJECT_DIR / "data"))
TONE_CACHE_DIR = DATA_DIR / "tones"
