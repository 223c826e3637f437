# =======================
# TOKEN DEFAULTS
# =======================

# --- Stablecoins ---
# Used when the config file has no "stable_coins" list. Compared case-insensitively.
STABLE_COINS = {
    "usdt", "usdc", "busd", "tusd", "dai", "pax", "usdp", "husd", "gusd", "eurt", "pyusd", "fdusd"
}

# --- Symbol remap ---
# Whale Alert has reported some assets under more than one ticker over time.
# Raw ticker -> canonical ticker, applied before aggregation.
SYMBOL_REMAP = {
    "pax": "usdp",  # Paxos Standard was renamed Pax Dollar
}
