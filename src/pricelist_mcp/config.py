"""Configuration for the price-list MCP server."""

import os

# Server settings
HTTP_PORT = int(os.getenv("HTTP_PORT", "8080"))
RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))

# Dashboard REST API (price lists scraped from reseller spreadsheets)
PRICELIST_API_URL = os.getenv("PRICELIST_API_URL", "").rstrip("/")
PRICELIST_API_TOKEN = os.getenv("PRICELIST_API_TOKEN", "")
PRODUCTS_PATH = "/api/products"
AVAILABLE_DATES_PATH = "/api/products/available-dates"

# Local JSON snapshot, used instead of the API when set
PRICELIST_FILE = os.getenv("PRICELIST_FILE", "")

# Request settings
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10.0"))
PRICELIST_CACHE_TTL = int(os.getenv("PRICELIST_CACHE_TTL", "300"))  # Price lists refresh a few times a day
PRICELIST_CACHE_MAX_DATES = 64  # Cached price lists, one per date

# Search settings
MAX_QUERY_LENGTH = 200
DEFAULT_RESULT_LIMIT = 50
MAX_RESULT_LIMIT = 500

# Category code the dashboard uses for phones
PHONE_CATEGORY = "IPH"
