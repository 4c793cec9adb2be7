# Utility for loading environment variables
import os
from dotenv import load_dotenv

load_dotenv()

# Chains are simple cycles of 2..MAX_CHAIN_LENGTH candidacy edges
MIN_CHAIN_LENGTH = 2
MAX_CHAIN_LENGTH = 10

# Bounded retry budget for StoreUnavailable
STORE_RETRIES = int(os.getenv("STORE_RETRIES", "5"))
STORE_BACKOFF_SECONDS = float(os.getenv("STORE_BACKOFF_SECONDS", "1.0"))

# Local snapshot of the application record store
DATA_DIR = os.getenv("DATA_DIR", "data")
