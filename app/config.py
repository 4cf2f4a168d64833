from pathlib import Path
import os

from dotenv import load_dotenv

# Load environment variables from repo root and next to the app package (if present).
REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")

TASKS_FILE = Path(os.getenv("TASKS_FILE", str(REPO_ROOT / "data" / "tasks.json")))

APP_ENV = os.getenv("APP_ENV", "production")
DEBUG = APP_ENV == "development"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
API_VERSION = os.getenv("API_VERSION", "1.0.0")

_cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
CORS_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]
