# chataide/config.py
# -----------------------------------------------------------------------------
# Konfiguration: Modul-Konstanten, jeweils per CHATAIDE_* Umgebungsvariable
# überschreibbar. Ungültige Zahlen fallen still auf den Default zurück.
# -----------------------------------------------------------------------------

import os
import sys


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, "").strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, "").strip())
    except ValueError:
        return default


def _env_optional_int(name: str):
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _default_chrome_path() -> str:
    if sys.platform.startswith("win"):
        return r"C:\Program Files\Google\Chrome\Application\chrome.exe"
    if sys.platform == "darwin":
        return "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"
    return "google-chrome"


# -------------------- Browser -------------------------------------------------
DEBUG_PORT         = _env_int("CHATAIDE_DEBUG_PORT", 9222)
CHROME_PATH        = _env_str("CHATAIDE_CHROME_PATH", _default_chrome_path())
CHROME_PROFILE_DIR = _env_str("CHATAIDE_PROFILE_DIR", os.path.join(os.getcwd(), "ChromeRemoteProfile"))
CHROME_STARTUP_WAIT = 2.0

# -------------------- Extraktion ---------------------------------------------
MESSAGE_WINDOW     = _env_int("CHATAIDE_MESSAGE_WINDOW", 10)
GENERIC_POOL_CAP   = _env_int("CHATAIDE_GENERIC_POOL_CAP", 30)
DIAGNOSTIC_SAMPLE  = 5

# -------------------- Injektion ----------------------------------------------
FOCUS_ATTEMPTS     = 3
FOCUS_RETRY_DELAY  = 0.25

# -------------------- Backend ------------------------------------------------
BACKEND_HOST       = _env_str("CHATAIDE_BACKEND_HOST", "localhost")
BACKEND_BASE_PORT  = _env_int("CHATAIDE_BACKEND_PORT", 5000)
BACKEND_PORT_SPAN  = _env_int("CHATAIDE_BACKEND_PORT_SPAN", 3)
BACKEND_PATH       = _env_str("CHATAIDE_BACKEND_PATH", "/generate-replies")
BACKEND_TIMEOUT    = _env_float("CHATAIDE_BACKEND_TIMEOUT", 4.0)
USER_AGE           = _env_optional_int("CHATAIDE_USER_AGE")
