"""Shared asset names and amounts for tests."""

USDC = "USDC"
USDT = "USDT"
DAI = "DAI"
WETH = "WETH"

# One million base units: the reference deposit size used across tests
MILLION = 1_000_000

# One day in milliseconds
DAY_MS = 86_400_000
