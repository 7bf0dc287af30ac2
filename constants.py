# constants.py
"""
Application-level constants.

These values are static and do not change between renderer runs.
They describe the input file format, fallback visual attributes and the
preview window, i.e. everything that is not part of the per-dataset
configuration in `config.json`.
"""

# --- Input Format ---
# Number of leading lines discarded as header.
HEADER_LINES = 1
# Columns 1-3 are position XYZ, columns 4-6 velocity XYZ.
MIN_RECORD_FIELDS = 6

# --- Pipeline Defaults ---
# Maximum number of primitives the preview host can display.
DEFAULT_CAPACITY = 1000
DEFAULT_PARTICLE_SIZE = 0.1
DEFAULT_COLOR_MODE = "distance"

# Color given to every primitive when attribute mapping cannot run
# (e.g. degenerate normalization). RGBA, channels in [0, 1].
NEUTRAL_COLOR = (0.5, 0.5, 0.5, 1.0)

# Default color and alpha keys for the gradient, used if the config file
# does not provide one. Color keys are (time, r, g, b), alpha keys (time, a).
DEFAULT_GRADIENT_COLOR_KEYS = [
    (0.0, 1.0, 0.85, 0.2),   # Warm Yellow (dense core)
    (0.5, 0.9, 0.2, 0.4),    # Magenta
    (1.0, 0.1, 0.3, 1.0),    # Deep Blue (outskirts)
]
DEFAULT_GRADIENT_ALPHA_KEYS = [
    (0.0, 1.0),
    (1.0, 0.25),
]

# --- Preview Window ---
FPS = 60
BACKGROUND_COLOR = (12, 12, 20)  # Near Black
DEFAULT_WINDOW_WIDTH = 1200
DEFAULT_WINDOW_HEIGHT = 800
# Fraction of the smaller window dimension covered by the dataset extent.
VIEW_FILL_RATIO = 0.45
# Multiplicative step applied to the particle size by the +/- keys.
SIZE_STEP = 1.25
# Radians per frame.
DEFAULT_ROTATION_SPEED = 0.005

# --- Normalization ---
# Magnitudes are cached as float32, so a distance denominator within this many
# float32 epsilons of the largest position magnitude is rounding noise.
NORMALIZATION_ROUNDING_ULPS = 4
