import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).parent.parent

# Search backend: "local" reads ORDER_DATA_FILE, "remote" calls ORDER_SEARCH_URL
ORDER_SEARCH_MODE    = os.getenv("ORDER_SEARCH_MODE", "local").strip().lower()
ORDER_SEARCH_URL     = os.getenv("ORDER_SEARCH_URL", "")
ORDER_SEARCH_TOKEN   = os.getenv("ORDER_SEARCH_TOKEN") or None
ORDER_SEARCH_TIMEOUT = float(os.getenv("ORDER_SEARCH_TIMEOUT", "30"))
ORDER_DATA_FILE      = Path(os.getenv("ORDER_DATA_FILE", str(BASE_DIR / "data" / "sales_orders.json")))

# Logging
LOG_DIR  = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))
LOG_FILE = LOG_DIR / "app.log"

# Server
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# Streamlit console
LISTER_URL = os.getenv("LISTER_URL", "http://localhost:8000/orders")
API_URL    = os.getenv("API_URL", "http://localhost:8000/api")
