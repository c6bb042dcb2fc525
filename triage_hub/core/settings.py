"""
Core settings and environment variables for Triage Hub.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Dict, List, Optional, Tuple


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Triage Hub"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API (comma separated)
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # External classifier service
    AI_ENABLED: bool = True  # If False, every triage call uses the rule-based fallback
    AI_PRIORITIZATION_URL: str = "http://localhost:5000"  # /api/prioritize, /api/predict-resources
    AI_CHATBOT_URL: str = "http://localhost:5001"  # /api/chat
    AI_TIMEOUT_SECONDS: float = 5.0  # Shared by all three outbound operations
    AI_MAX_WORKERS: int = 8  # Concurrent outbound classifier calls

    # Collaborators: "firestore" for production, "memory" for local development
    STORE_BACKEND: str = "firestore"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # Development tokens for the in-memory authenticator: "token:user_id:ROLE,..."
    REALTIME_DEV_TOKENS: str = ""
    REALTIME_DELIVERY_TIMEOUT_SECONDS: float = 5.0  # Per member; a stalled client is skipped after this

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def dev_tokens(self) -> Dict[str, Tuple[str, str]]:
        """Parse REALTIME_DEV_TOKENS into {token: (user_id, role)}."""
        tokens = {}
        for entry in self.REALTIME_DEV_TOKENS.split(","):
            parts = [part.strip() for part in entry.split(":")]
            if len(parts) == 3 and all(parts):
                tokens[parts[0]] = (parts[1], parts[2].upper())
        return tokens


# Global settings instance
settings = Settings()
