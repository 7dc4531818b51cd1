# app/config.py
import os
from dotenv import load_dotenv

# Environment-driven settings shared by both services.
load_dotenv()

SERVICE_NAME = os.getenv("SERVICE_NAME", "product-service")
STORE_BACKEND = os.getenv("STORE_BACKEND", "mongo")  # mongo or memory

MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DATABASE = os.getenv("MONGODB_DATABASE", "catalog")
MONGODB_TIMEOUT_MS = int(os.getenv("MONGODB_TIMEOUT_MS", 5000))

PRODUCT_SERVICE_PORT = int(os.getenv("PRODUCT_SERVICE_PORT", 3001))
USER_SERVICE_PORT = int(os.getenv("USER_SERVICE_PORT", 3002))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

SERVICE_PORTS = {
    "product-service": PRODUCT_SERVICE_PORT,
    "user-service": USER_SERVICE_PORT,
}
