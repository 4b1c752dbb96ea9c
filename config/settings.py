# File: ethanol_gauging/config/settings.py
import os
import logging
from dotenv import load_dotenv

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(),
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
dotenv_path = os.path.join(project_root, '.env')

if os.path.exists(dotenv_path):
    if load_dotenv(dotenv_path=dotenv_path):
        logger.info(f"Successfully loaded .env file from {dotenv_path}")
    else:
        logger.info(f".env file at {dotenv_path} processed but might be empty or set no new vars.")
else:
    logger.debug(f".env file not found at {dotenv_path}. Using system environment variables or defaults.")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# --- API Configuration ---
API_KEY = os.getenv("API_KEY")
if not API_KEY:
    logger.warning("API_KEY is not set. The API will not be accessible without it.")

FLASK_PORT = int(os.getenv("FLASK_PORT", "5000"))
API_THREADS = int(os.getenv("API_THREADS", "8"))
logger.info(f"FLASK_PORT = {FLASK_PORT}")
logger.info(f"API_THREADS = {API_THREADS}")


# --- Volume Correction Settings ---
# The correction grid takes a moment to build; the API builds it before serving by default.
PREBUILD_CORRECTION_GRID = _env_flag("PREBUILD_CORRECTION_GRID", "true")
logger.info(f"PREBUILD_CORRECTION_GRID = {PREBUILD_CORRECTION_GRID}")

logger.info("Configuration settings loaded.")
