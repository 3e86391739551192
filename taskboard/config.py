"""Runtime configuration for the Taskboard API."""
import os
from dotenv import load_dotenv

# Load environment variables from a local .env file if present
load_dotenv()

ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Persistence
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./taskboard.db")

# Identity provider (HS256 bearer tokens, ``sub`` carries the owner id)
AUTH_SECRET = os.environ.get("AUTH_SECRET", "change-me-in-production")
AUTH_ALGORITHM = os.environ.get("AUTH_ALGORITHM", "HS256")

# Attachment storage
UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "./uploads")
UPLOAD_URL_PREFIX = "/uploads"
MAX_ATTACHMENTS_PER_REQUEST = int(os.environ.get("MAX_ATTACHMENTS_PER_REQUEST", "5"))

# Google Calendar mirroring; disabled when no access token is configured
GOOGLE_CALENDAR_ACCESS_TOKEN = os.environ.get("GOOGLE_CALENDAR_ACCESS_TOKEN")
GOOGLE_CALENDAR_ID = os.environ.get("GOOGLE_CALENDAR_ID", "primary")
CALENDAR_TIMEOUT_SECONDS = float(os.environ.get("CALENDAR_TIMEOUT_SECONDS", "5"))

# Real-time fan-out
BROADCAST_QUEUE_SIZE = int(os.environ.get("BROADCAST_QUEUE_SIZE", "100"))

# CORS
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
