"""
Core constants and limits.

Defines system-wide constants for the simulation, the synthetic data
generator and the metrics calculator.
"""

# Time
MS_PER_DAY = 24 * 60 * 60 * 1000
DAYS_PER_YEAR = 365

# Configuration limits
MAX_BACKTEST_DURATION_DAYS = 365  # Backtest period cannot exceed one year
MAX_SLIPPAGE = 1.0

# Position simulation
INITIAL_BIN_COUNT = 10  # Bins the initial capital is spread over
BIN_STEP = 0.001  # Each bin spans a 0.1% price step
DAILY_FEE_RATE = 0.003  # 0.3% of position value earned per day
VALUE_DRIFT_RANGE = 0.001  # Per-tick drift in [-0.05%, +0.05%]
DEFAULT_MIN_CONFIDENCE = 0.5
DEFAULT_MIN_PROFIT_THRESHOLD = 0.0  # Percent

# Progress fractions for each phase boundary
PROGRESS_INITIALIZING = 0.05
PROGRESS_FETCHING = 0.15
PROGRESS_SIMULATION_START = 0.25
PROGRESS_SIMULATION_SPAN = 0.65  # 25% to 90%
PROGRESS_METRICS = 0.90
PROGRESS_SUMMARY = 0.95
PROGRESS_UPDATES_PER_RUN = 100

# Summary generation
SUMMARY_WINDOW_SIZE = 30
HIGH_SHARPE_THRESHOLD = 1.0
LOW_SHARPE_THRESHOLD = 0.5
HIGH_DRAWDOWN_THRESHOLD = 0.2
LOW_WIN_RATE_THRESHOLD = 0.4
HIGH_REBALANCE_FREQUENCY = 2.0  # Rebalances per day

# Metrics
DEFAULT_RISK_FREE_RATE = 0.05  # 5% annual
IL_RECOVERY_FEE_SCALE = 1000.0  # Fees (USD) that count as full IL recovery
EXTREME_TOTAL_RETURN = 10.0  # 1000%
EXTREME_SHARPE_RATIO = 5.0
EXTREME_DRAWDOWN = 0.95

# Historical data service
DEFAULT_CACHE_SIZE = 50
DEFAULT_CACHE_TTL_SECONDS = 12 * 60 * 60  # 12 hours

# Synthetic data generator
REGIME_SWITCH_PROBABILITY = 0.02  # 2% chance per tick
MIN_REGIME_STRENGTH = 0.3
LIQUIDITY_BIN_RANGE = 20  # Bins generated on each side of the active bin
ACTIVE_BIN_WINDOW = 2  # Bins within this distance count as active
BASE_BIN_FEE_RATE = 0.003
LIQUIDITY_DECAY_RATE = 0.1
