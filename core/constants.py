"""
Shared constants.

This module has no dependencies on models or services to avoid circular imports.
"""

# Supported target intensity range (inclusive)
MIN_INTENSITY = 1
MAX_INTENSITY = 10

# Supported session length range in minutes (inclusive)
MIN_SESSION_MINUTES = 5
MAX_SESSION_MINUTES = 120

# History windows used by the progression analyzer
HISTORY_WINDOW_DAYS = 28
PHASE_WINDOW_DAYS = 14
DEFAULT_DAYS_SINCE_SAME_ARCHETYPE = 14

# Sessions at or above this intensity count as high intensity
HIGH_INTENSITY_THRESHOLD = 7

# Neutral values used when history carries no signal
DEFAULT_RECOVERY_SCORE = 7.0
DEFAULT_PHASE_INTENSITY = 5.0
DEFAULT_LAST_RPE = 5

# Number of RPE records requested from the feedback store per generation
FEEDBACK_LOOKUP_LIMIT = 20

# Suffixes used to derive independent random streams from a generation seed
WARMUP_SEED_SUFFIX = "_warmup"
COOLDOWN_SEED_SUFFIX = "_cooldown"
PROGRESSION_SEED_SUFFIX = "_progression"

GENERATOR_VERSION = "v0.3.0"
