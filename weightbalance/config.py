from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

OUTPUTS_DIR = PROJECT_ROOT / "outputs"
LOGS_DIR = OUTPUTS_DIR / "logs"

# Sibling weights are percentage points and must add up to this.
TARGET_TOTAL = 100.0

# A set is balanced when |total - TARGET_TOTAL| <= BALANCE_TOLERANCE.
BALANCE_TOLERANCE = 0.01

# Suggested adjustments at or below this magnitude are not reported.
ADJUSTMENT_TOLERANCE = 0.01

# Weights are rounded half-up to this many decimals.
WEIGHT_DECIMALS = 2
MESSAGE_DECIMALS = 1

# normalize() pushes any post-rounding residual above this onto one item,
# so its output sums to TARGET_TOTAL up to float error.
RESIDUAL_EPSILON = 1e-9

# Field names as stored on sub-measures. Lookups ignore case and separators,
# so "isWeightLocked" and "is_weight_locked" both match LOCK_FIELD.
ID_FIELD = "id"
WEIGHT_FIELD = "weight"
LOCK_FIELD = "isWeightLocked"

TRUE_STRINGS = ("1", "true", "yes", "y", "on")

OPERATIONS = ["describe", "auto-balance", "normalize", "suggest"]
