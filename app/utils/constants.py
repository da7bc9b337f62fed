TRACKED_MODULES = (
    "token_factory",
    "bonding_curve_pool",
    "graduation_handler",
    "router",
)

BUY_TOKENS_FUNCTION = "bonding_curve_pool::buy_tokens"

# type-tag fragment → decoded kind
EVENT_FRAGMENTS = {
    "CreateFAEvent":    "fa_created",
    "MintFAEvent":      "fa_minted",
    "BurnFAEvent":      "fa_burned",
    "TokensPurchased":  "tokens_purchased",
    "TokensSold":       "tokens_sold",
    "PoolGraduated":    "pool_graduated",
    # DEX telemetry, logged only
    "PoolCreated":      "dex_pool_created",
    "LiquidityAdded":   "liquidity_added",
    "LiquidityRemoved": "liquidity_removed",
    "FeeCollected":     "fee_collected",
    "Swapped":          "swapped",
}

# events that may carry the token amount of a direct buy_tokens call
TOKEN_TRANSFER_FRAGMENTS = ("Transfer", "Deposit")

BPS_DENOMINATOR = 10_000
MICROS_PER_SECOND = 1_000_000
OCTAS_PER_APT = 100_000_000
