from decimal import Decimal

STABLECOINS = {"USDG", "USDT", "USDC", "USD", "EUR"}

# Kraken-style asset codes ("ZUSD", "ZEUR") are stablecoins once the prefix is gone
CONVERSION_STABLECOINS = STABLECOINS | {"ZUSD", "ZEUR"}

STABLE_ASSET = "USDG"

ASSET_PREFIX_PATTERN = r"^[XZ]"

STABLECOIN_BPS_LEVELS = [2, 5, 10, 100]
RISK_BPS_LEVELS = [10, 25, 50, 100]

BPS = Decimal(10_000)

# Rolling windows, in entries of the date-sorted series
WEEK_WINDOW = 7
MONTH_WINDOW = 30
AVERAGE_DIVISOR = Decimal(30)

THRESHOLD_1M = Decimal(1_000_000)
THRESHOLD_5M = Decimal(5_000_000)
THRESHOLD_25M = Decimal(25_000_000)

THRESHOLD_KEYS = ("1Mto5M", "5Mto25M", "over25M")

# Seconds between successive pair requests on the same venue
RATE_LIMITS = {
    "kraken": 1.0,
    "bullish": 0.5,
    "gate": 0.1,
    "kucoin": 0.2,
    "bitmart": 0.25,
    "okx": 0.15,
}

EXCHANGE_NAMES = {
    "kraken": "Kraken",
    "bullish": "Bullish",
    "gate": "Gate.io",
    "kucoin": "Kucoin",
    "bitmart": "Bitmart",
    "okx": "OKX",
}

BACKFILL_HOUR_UTC = 23
BACKFILL_MINUTE_UTC = 59
