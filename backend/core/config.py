import os
from typing import List, Literal
from dotenv import load_dotenv

# Load environment variables from .env file located in the backend directory.
# Environment variables explicitly set (e.g., by Docker Compose) take precedence.
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
ENV_PATH = os.path.join(BASE_DIR, '.env')
load_dotenv(ENV_PATH)


def parse_cors(value: str) -> List[str]:
    """
    Parses CORS origins. Accepts comma-separated string or list-like string.
    Example: "http://localhost,http://127.0.0.1" → ["http://localhost", "http://127.0.0.1"]
    If the value is empty, a default list of common development origins is provided.
    """
    if not value:
        # Default CORS origins for local development (Next.js / Vite dashboards)
        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ]
    if isinstance(value, str):
        value = value.strip()
        if value.startswith("[") and value.endswith("]"):
            return [i.strip().strip('"').strip("'") for i in value[1:-1].split(",")]
        return [i.strip() for i in value.split(",")]
    raise ValueError("Invalid CORS format")


def parse_bool(value: str, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # --- General Environment Settings ---
    ENVIRONMENT: Literal["local", "staging",
                         "production"] = os.getenv('ENVIRONMENT', 'local')

    # --- PostgreSQL Database Configuration ---
    POSTGRES_USER: str = os.getenv('POSTGRES_USER', 'reviews')
    POSTGRES_PASSWORD: str = os.getenv('POSTGRES_PASSWORD', 'reviews_password')
    POSTGRES_SERVER: str = os.getenv('POSTGRES_SERVER', 'postgres')
    POSTGRES_PORT: int = int(os.getenv('POSTGRES_PORT', 5432))
    POSTGRES_DB: str = os.getenv('POSTGRES_DB', 'reviews_db')

    # Full database URL. Takes precedence over the individual components.
    POSTGRES_DB_URL: str = os.getenv('POSTGRES_DB_URL', "")

    # Create tables on startup (development only; use migrations elsewhere)
    AUTO_CREATE_TABLES: bool = parse_bool(os.getenv('AUTO_CREATE_TABLES'), default=True)

    # --- CORS Configuration ---
    RAW_CORS_ORIGINS: str = os.getenv('BACKEND_CORS_ORIGINS', '')
    BACKEND_CORS_ORIGINS: List[str] = parse_cors(RAW_CORS_ORIGINS)

    # --- Hostaway (property-management platform) ---
    HOSTAWAY_ACCOUNT_ID: str = os.getenv('HOSTAWAY_ACCOUNT_ID', '')
    HOSTAWAY_API_KEY: str = os.getenv('HOSTAWAY_API_KEY', '')
    HOSTAWAY_BASE_URL: str = os.getenv('HOSTAWAY_BASE_URL', 'https://api.hostaway.com/v1')

    # --- Google Places ---
    GOOGLE_PLACES_API_KEY: str = os.getenv('GOOGLE_PLACES_API_KEY', '')
    GOOGLE_PLACES_BASE_URL: str = os.getenv(
        'GOOGLE_PLACES_BASE_URL', 'https://maps.googleapis.com/maps/api/place')

    # Serve the illustrative datasets instead of calling the source APIs
    USE_MOCK_DATA: bool = parse_bool(os.getenv('USE_MOCK_DATA'))
    # Seconds before an outbound source API call is abandoned
    EXTERNAL_API_TIMEOUT: float = float(os.getenv('EXTERNAL_API_TIMEOUT', 10))

    # --- Pagination ---
    DEFAULT_PAGE_SIZE: int = int(os.getenv('DEFAULT_PAGE_SIZE', 100))
    MAX_PAGE_SIZE: int = int(os.getenv('MAX_PAGE_SIZE', 1000))

    # --- Logging ---
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT: str = os.getenv('LOG_FORMAT', 'json')
    LOG_TO_FILE: bool = parse_bool(os.getenv('LOG_TO_FILE'))
    LOG_DIR: str = os.getenv('LOG_DIR', 'logs')

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """
        Constructs the SQLAlchemy database URI.
        Prioritizes a full URL (POSTGRES_DB_URL) over individual components.
        """
        if self.POSTGRES_DB_URL:
            return self.POSTGRES_DB_URL

        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def hostaway_configured(self) -> bool:
        return bool(self.HOSTAWAY_ACCOUNT_ID and self.HOSTAWAY_API_KEY)

    @property
    def google_places_configured(self) -> bool:
        return bool(self.GOOGLE_PLACES_API_KEY)


# Instantiate the settings object to be used throughout the application
settings = Settings()
