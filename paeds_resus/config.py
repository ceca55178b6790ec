"""
Paediatric Resuscitation Engine - Configuration
===============================================
Centralised settings. Values can be overridden from the environment or a
project-level .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PACKAGE_DIR = Path(__file__).resolve().parent                    # paeds_resus/
PROJECT_ROOT = PACKAGE_DIR.parent
CASE_DATA_DIR = Path(os.getenv("PAEDS_CASE_DATA_DIR", str(PACKAGE_DIR / "core" / "simulation" / "data")))

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

# ── Logging ─────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("PAEDS_LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("PAEDS_LOG_FILE", "")               # empty = console only

# ── HTTP surface ────────────────────────────────────────────────────────
CORS_ORIGINS = [o.strip() for o in os.getenv("PAEDS_CORS_ORIGINS", "*").split(",") if o.strip()]

# ── Simulation scoring ──────────────────────────────────────────────────
SIMULATION_TIME_BONUS_SECONDS = float(os.getenv("PAEDS_TIME_BONUS_SECONDS", "60"))

# ── Override accountability ─────────────────────────────────────────────
OVERRIDE_MIN_JUSTIFICATION_CHARS = int(os.getenv("PAEDS_MIN_JUSTIFICATION_CHARS", "50"))

# Quality score coefficients
QUALITY_BASE_SCORE = 100.0
QUALITY_VOLUME_THRESHOLD = 50          # overrides before the volume penalty starts
QUALITY_VOLUME_PENALTY_PER = 0.2       # per override beyond the threshold
QUALITY_VOLUME_PENALTY_CAP = float(os.getenv("PAEDS_QUALITY_VOLUME_CAP", "0")) or None   # 0 = uncapped
QUALITY_CRITICAL_PENALTY = 2.0
QUALITY_HIGH_PENALTY = 1.0
QUALITY_STRONG_IMPROVEMENT_RATE = 70.0  # percent
QUALITY_STRONG_IMPROVEMENT_BONUS = 10.0
QUALITY_MODEST_IMPROVEMENT_RATE = 50.0
QUALITY_MODEST_IMPROVEMENT_BONUS = 5.0
