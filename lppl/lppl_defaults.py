NR_PARAMS = 7

# Seed used when nothing better is known about the series.
# tc is placed this many elapsed-time units after the series length.
TC_OFFSET = 30
M_SEED = 0.7
OMEGA_SEED = 8.0
B_SEED = -1.0
C_SEED = 0.1
PHI_SEED = 0.0

# Ranges for the extra seeds of a multi-start fit.
# The first seed is always the deterministic one above.
MULTI_START_COUNT = 8
MULTI_START_RANDOM_SEED = 0
TC_MIN_EXTRA_DAYS = 5
M_RANGE = (0.1, 0.9)
OMEGA_RANGE = (4.0, 15.0)

# Nelder-Mead defaults.
MAX_ITERATIONS = 5000
MAX_EVALUATIONS = 10000
X_ABSOLUTE_TOLERANCE = 1e-6
F_ABSOLUTE_TOLERANCE = 1e-10
# Relative size of the initial simplex; components at zero get an absolute step instead.
INITIAL_STEP = 0.05
ZERO_STEP = 0.05
RESTARTS = 2

# CoinMarketCap historical export.
CSV_DELIMITER = ";"
CSV_DATE_COLUMN = 0
CSV_PRICE_COLUMN = 6
CSV_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

DEFAULT_PLOT_FILE = "bitcoin_lppl.png"
PLOT_WIDTH_INCHES = 10
PLOT_HEIGHT_INCHES = 6
PLOT_POINTS = 500
