import os
from dotenv import load_dotenv

# Загружаем переменные из config/.env
dotenv_path = os.path.join(os.path.dirname(__file__), '.env')
load_dotenv(dotenv_path=dotenv_path)

# --- Ключи Helius (через запятую) ---
HELIUS_API_KEYS = os.getenv("HELIUS_API_KEYS", "").split(",")
# Убираем пустые строки
HELIUS_API_KEYS = [k.strip() for k in HELIUS_API_KEYS if k.strip()]

SOLANA_RPC_URL = os.getenv("SOLANA_RPC_URL", "https://mainnet.helius-rpc.com")
RPC_REQUESTS_PER_SECOND = int(os.getenv("RPC_REQUESTS_PER_SECOND", "9"))
RPC_TIMEOUT_SECONDS = float(os.getenv("RPC_TIMEOUT_SECONDS", "30"))

COINGECKO_SIMPLE_PRICE_URL = os.getenv(
    "COINGECKO_SIMPLE_PRICE_URL", "https://api.coingecko.com/api/v3/simple/price"
)
PRICE_TIMEOUT_SECONDS = float(os.getenv("PRICE_TIMEOUT_SECONDS", "15"))

LOG_DIR = os.getenv("LOG_DIR", "logs")

# --- Feature-флаги ---
STAGE_EVENTS_LOG_ENABLED = os.getenv("STAGE_EVENTS_LOG_ENABLED", "True").lower() == "true"
