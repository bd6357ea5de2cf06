"""
Configuration file for the Listing Video Generator.
Contains all global constants and the placeholder content used by the built-in pipeline stages.
"""

import os

# --- Constants ---
PROJECT_ROOT = os.getcwd()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./listing_video.db")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
MEDIA_DIR = os.getenv("MEDIA_DIR", os.path.join(PROJECT_ROOT, "media"))
IMAGE_UPLOAD_DIR = os.path.join(MEDIA_DIR, "property_images")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

API_PREFIX = "/api"
USER_HEADER = "X-User-Email"
DEFAULT_VIDEOS_LIMIT = 3

# Outbound webhook calls (seconds)
WEBHOOK_TIMEOUT = float(os.getenv("WEBHOOK_TIMEOUT", "30"))

# --- Job polling (seconds) ---
POLL_BASE_INTERVAL = 2.0
POLL_MAX_INTERVAL = 10.0
POLL_MAX_DURATION = 5 * 60
REALTIME_WATCH_INTERVAL = 1.0
REALTIME_RETRY_DELAY = 5.0

# --- Job statuses ---
STATUS_ANALYZING = "analyzing"
STATUS_REVIEWING = "reviewing"
STATUS_GENERATING_SCRIPT = "generating_script"
STATUS_SCRIPT_READY = "script_ready"
STATUS_GENERATING_VIDEO = "generating_video"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_FAILED)

STATUS_PROGRESS = {
    STATUS_ANALYZING: 20,
    STATUS_REVIEWING: 40,
    STATUS_SCRIPT_READY: 60,
    STATUS_GENERATING_SCRIPT: 70,
    STATUS_GENERATING_VIDEO: 85,
    STATUS_COMPLETED: 100,
}

# --- Script defaults ---
DEFAULT_LANGUAGE = "English"
DEFAULT_ACCENT = "US"
DEFAULT_VOICE_ID = "en-us-female-1"

# --- Placeholder content for the built-in stages ---
DEFAULT_PROPERTY = {
    "title": "Beautiful Family Home",
    "description": "Spacious and well-maintained property",
    "price": 450000,
    "location": "Prime Location",
    "bedrooms": 3,
    "bathrooms": 2,
    "area": 2000,
}
VISIBLE_PROPERTY_FIELDS = ["title", "description", "price", "location", "bedrooms", "bathrooms", "area"]

MOCK_EXTRACTED_PROPERTY = {
    "description": "Beautiful property with modern amenities and excellent location.",
    "price": 500000,
    "location": "Main Street, City Center",
    "bedrooms": 3,
    "bathrooms": 2,
    "area": 1500,
}

MOCK_VIDEO_URL = "https://example.com/sample-video.mp4"
MOCK_THUMBNAIL_URL = "https://via.placeholder.com/640x360/4f46e5/ffffff?text=Property+Video"
MOCK_VIDEO_DURATION = 30
MOCK_VIDEO_FILE_SIZE = 13000000

# --- Prompt-style templates for narration ---

GENERATED_SCRIPT_TEMPLATE = """Welcome to this amazing {bedrooms}-bedroom, {bathrooms}-bathroom home located at {location}.

This beautiful property spans {area} square feet and offers modern living at its finest. Priced at ${price}, this home features {description}

Don't miss this opportunity to own a piece of paradise. Contact us today to schedule a viewing and make this dream home yours!"""

FALLBACK_SCRIPT_TEMPLATE = (
    "Welcome to this stunning {bedrooms}-bedroom, {bathrooms}-bathroom home located in {location}. "
    "This beautiful property offers {area} square feet of living space, perfect for families looking "
    "for comfort and style. With its modern amenities and prime location, this home is truly a gem "
    "in today's market."
)

# Run pipeline stages in-process instead of on a worker (local development)
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "0").lower() in ("1", "true", "yes")
