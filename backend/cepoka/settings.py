# FILE: cepoka/settings.py
import logging
import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent
BACKEND_DIR = PACKAGE_DIR.parent

# .env 는 환경변수를 덮어쓰지 않음
load_dotenv(dotenv_path=BACKEND_DIR / ".env", override=False)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# --- DB (cache store) ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cepoka.db")

# --- Admin auth ---
SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_change_me")  # 운영에서는 환경변수로!
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))  # 24h
ADMIN_ACCESS_KEY = os.getenv("ADMIN_ACCESS_KEY", "cepoka101")
ADMIN_ACCESS_KEY_HASH = os.getenv("ADMIN_ACCESS_KEY_HASH")  # pbkdf2_sha256, 있으면 우선


def jwt_exp_delta():
    return timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)


# --- Site ---
SITE_NAME = "Cepoka Beauty Hub"
SITE_DESCRIPTION = "Your one-stop shop for beauty equipment and supplies"
SITE_URL = os.getenv("SITE_URL", "https://cepokabeautyhub.com").rstrip("/")
THEME_COLOR = "#ffffff"

# --- Offline edge ---
ORIGIN_URL = os.getenv("ORIGIN_URL", SITE_URL).rstrip("/")
NETWORK_TIMEOUT = float(os.getenv("NETWORK_TIMEOUT", "10"))
EDGE_INSTALL_ON_STARTUP = _env_bool("EDGE_INSTALL_ON_STARTUP", True)

# --- Appwrite ---
APPWRITE_ENDPOINT = os.getenv("APPWRITE_ENDPOINT", "https://cloud.appwrite.io/v1").rstrip("/")
APPWRITE_PROJECT_ID = os.getenv("APPWRITE_PROJECT_ID", "67d07dc9000bafdd5d81")
APPWRITE_API_KEY = os.getenv("APPWRITE_API_KEY", "")
APPWRITE_DATABASE_ID = os.getenv("APPWRITE_DATABASE_ID", "6813eadb003e7d64f63c")
APPWRITE_PRODUCTS_COLLECTION_ID = os.getenv("APPWRITE_PRODUCTS_COLLECTION_ID", "6813eaf40036e52c29b1")
APPWRITE_CATEGORIES_COLLECTION_ID = os.getenv("APPWRITE_CATEGORIES_COLLECTION_ID", "6817640f000dd0b67c77")
APPWRITE_STOCK_PRODUCTS_COLLECTION_ID = os.getenv(
    "APPWRITE_STOCK_PRODUCTS_COLLECTION_ID", "681a651d001cc3de8395"
)
APPWRITE_STOCK_MOVEMENTS_COLLECTION_ID = os.getenv(
    "APPWRITE_STOCK_MOVEMENTS_COLLECTION_ID", "681bddcc000204a3748d"
)
APPWRITE_STORAGE_ID = os.getenv("APPWRITE_STORAGE_ID", "6813ea36001624c1202a")

# --- Assets (icons) ---
PUBLIC_DIR = Path(os.getenv("PUBLIC_DIR", str(BACKEND_DIR / "public")))
SOURCE_LOGO = Path(os.getenv("SOURCE_LOGO", str(PUBLIC_DIR / "icons" / "sitelogo.png")))

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging() -> None:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
