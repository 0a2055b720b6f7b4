"""
Configuration for the stock chart generator
Modify these settings according to your preferences
"""

# Data fetching settings
LOOKBACK_DAYS = 30 * 6             # ~6 months of daily quotes
DATA_INTERVAL = "1d"

# RSI settings
RSI_PERIOD = 14                    # RSI calculation period
RSI_OVERSOLD_THRESHOLD = 30        # RSI oversold level
RSI_OVERBOUGHT_THRESHOLD = 70      # RSI overbought level

# MACD settings
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9

# Volatility settings
VOLATILITY_THRESHOLD_PCT = 2.0     # (high - low) / close in percent

# Visualization settings
FIGURE_SIZE = (8, 6)               # 800x600 at the default DPI
DPI = 100
MAX_X_LABELS = 6                   # Date labels shown per chart
OUTPUT_DIR = "."

# Logging settings
LOG_LEVEL = 'INFO'                 # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
LOG_TO_FILE = True                 # Whether to log to file


class ConfigurationError(ValueError):
    """Raised when indicator settings are invalid"""
