"""Runtime settings loaded from the environment.

Values can be placed in a .env file in the backend root:

ANTHROPIC_API_KEY=your_real_key_here

The app loads environment variables automatically using python-dotenv.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "").strip()
CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "").strip() or "claude-3-5-haiku-latest"
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "20"))

META_MAX_TOKENS = int(os.getenv("META_MAX_TOKENS", "300"))
VARIATION_MAX_TOKENS = int(os.getenv("VARIATION_MAX_TOKENS", "1200"))
KEYWORD_MAX_TOKENS = int(os.getenv("KEYWORD_MAX_TOKENS", "512"))
META_TEMPERATURE = float(os.getenv("META_TEMPERATURE", "0.7"))

AUDIT_MAX_WORKERS = int(os.getenv("AUDIT_MAX_WORKERS", "7"))
FETCH_TIMEOUT_SECONDS = float(os.getenv("FETCH_TIMEOUT_SECONDS", "12"))

AUDIT_STORE = os.getenv("AUDIT_STORE", "sqlite").strip().lower()
DB_PATH = Path(os.getenv("DB_PATH", "").strip() or Path(__file__).parent / "seo_audits.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
