from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()

class Settings(BaseModel):
    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./contracts.db")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Supabase (object store)
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    SUPABASE_STORAGE_BUCKET: str = os.getenv("SUPABASE_STORAGE_BUCKET", "contract-documents")

    # Geocoding (Nominatim)
    GEOCODER_BASE_URL: str = os.getenv("GEOCODER_BASE_URL", "https://nominatim.openstreetmap.org/search")
    GEOCODER_USER_AGENT: str = os.getenv("GEOCODER_USER_AGENT", "contract-import-service/1.0")
    GEOCODER_RATE_LIMIT_SECONDS: float = float(os.getenv("GEOCODER_RATE_LIMIT_SECONDS", "1.1"))
    GEOCODER_TIMEOUT_SECONDS: float = float(os.getenv("GEOCODER_TIMEOUT_SECONDS", "10"))

    # Users service / mail relay
    USERS_API_BASE_URL: str = os.getenv("USERS_API_BASE_URL", "")
    USERS_API_TIMEOUT_SECONDS: float = float(os.getenv("USERS_API_TIMEOUT_SECONDS", "30"))
    NOTIFIER_BASE_URL: str = os.getenv("NOTIFIER_BASE_URL", "")

    # Customer creation race
    CUSTOMER_RACE_MAX_ATTEMPTS: int = int(os.getenv("CUSTOMER_RACE_MAX_ATTEMPTS", "5"))
    CUSTOMER_RACE_INITIAL_DELAY_MS: int = int(os.getenv("CUSTOMER_RACE_INITIAL_DELAY_MS", "100"))

    # Extraction windows
    SECTION_MAX_SPAN: int = int(os.getenv("SECTION_MAX_SPAN", "3000"))
    PARTY_B_WINDOW: int = int(os.getenv("PARTY_B_WINDOW", "600"))

settings = Settings()
