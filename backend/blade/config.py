# blade/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Blade CMS API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for the admin frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Session token settings (signed with HS256)
    session_secret: str = os.getenv("SESSION_SECRET", "dev-session-secret")
    session_expire_minutes: int = int(os.getenv("SESSION_EXPIRE_MINUTES", str(60 * 24 * 30)))
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "sessionToken")

    # Shared secret the external identity provider signs its assertions with
    idp_shared_secret: str = os.getenv("IDP_SHARED_SECRET", "dev-idp-secret")

    # Seed data: owner of the "default" space created on first startup
    seed_user_email: str = os.getenv("SEED_USER_EMAIL", "seed@example.com")
    seed_on_startup: bool = os.getenv("SEED_ON_STARTUP", "true").lower() in ("true", "1", "yes")

settings = Settings()  # Instantiate configuration
