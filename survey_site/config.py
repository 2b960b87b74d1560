"""
SurveySite configuration
Reads API and storage settings from the environment (and an optional .env file)
"""
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root first, then fall back to the working directory
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# API
API_BASE_URL = (os.getenv('SURVEY_API_URL') or os.getenv('VITE_API_URL') or 'https://localhost:7126').rstrip('/')
API_TIMEOUT = float(os.getenv('SURVEY_API_TIMEOUT', '30'))
API_VERIFY_TLS = _env_bool('SURVEY_API_VERIFY_TLS', True)

# Public address of this Streamlit app, used when building share links
APP_PUBLIC_URL = os.getenv('SURVEY_APP_URL', 'http://localhost:8501').rstrip('/')

# Server-side store for signed-in users' completion markers
DATA_DIR = os.getenv('SURVEY_DATA_DIR', 'data')
MARKER_STORE_FILE = 'completion_markers.json'

LOG_LEVEL = os.getenv('SURVEY_LOG_LEVEL', 'INFO').upper()

# QR codes are rendered by an external image service
QR_SERVICE_URL = 'https://api.qrserver.com/v1/create-qr-code/'
QR_SIZE = '400x400'

RATING_MIN = 1
RATING_MAX = 10

SITE_NAME = 'SurveySite'


def setup_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """Configure root logging once for the app and return the package logger."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    return logging.getLogger('survey_site')
