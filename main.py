"""Process entry point: `uvicorn main:app`."""
import logging

from dotenv import load_dotenv

from statusproxy.app.config import load_settings
from statusproxy.app.main import create_app

# Load environment variables
load_dotenv()

settings = load_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
logger.info(f"Proxying {settings.UPSTREAM_URL} (ttl {settings.CACHE_TTL_S}s)")

app = create_app(settings)
