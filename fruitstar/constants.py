"""fruitstar/constants.py — Tunables shared by the level and wave systems."""

# ---------------------------------------------------------------------------
# Level construction
# ---------------------------------------------------------------------------

LUMINANCE_THRESHOLD = 50  # luminance >= threshold is walkable (0–255)
TILE_WATER = 1000  # water stored on each passable tile at setup
TILE_SIZE = 16  # world units per cell edge

# ---------------------------------------------------------------------------
# Waves
# ---------------------------------------------------------------------------

INTERMISSION_DURATION = 3.0  # seconds between waves
RELEASE_INTERVAL = 1.0  # seconds between unit releases during a wave
INITIAL_UNIT_COUNT = 10
FOLLOWER_SPEED = 2.0  # path segments per second

# ---------------------------------------------------------------------------
# Buildings
# ---------------------------------------------------------------------------

HARVESTER_RANGE = 50
FRUIT_REGROW_TIME = 6.0  # seconds from harvest until a branch fruits again

# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

SCREEN_WIDTH = 256
SCREEN_HEIGHT = 208
FPS = 60
HUD_HEIGHT = 16
