"""
Configuration constants.

Centralizes all magic numbers and configuration values used by level generation.
Organized by functional area for easy maintenance.
"""

# =============================================================================
# GENERAL
# =============================================================================

# RANDOM_SEED = None
RANDOM_SEED = "undercroft1"

# =============================================================================
# MAP DIMENSIONS
# =============================================================================

MAP_WIDTH = 80
MAP_HEIGHT = 43

# =============================================================================
# MAP GENERATION VISUALISER
# =============================================================================

# Record a deep-copied snapshot after each generation step so a debug overlay
# can replay how the level was built. Purely diagnostic.
SHOW_MAPGEN_VISUALISER = True

# =============================================================================
# CELLULAR AUTOMATA
# =============================================================================

# Percent chance (rolled on 1d100) that an interior tile starts as floor.
CA_FLOOR_CHANCE = 45
CA_SMOOTHING_PASSES = 15
# A tile becomes wall when more than this many of its 8 neighbours are walls...
CA_WALL_NEIGHBOUR_LIMIT = 4
# ...or when none of them are (removes isolated floor specks).

# =============================================================================
# ROOMS
# =============================================================================

ROOMS_MAX_ROOMS = 30
ROOMS_MIN_SIZE = 6
ROOMS_MAX_SIZE = 10

# =============================================================================
# WAVE FUNCTION COLLAPSE
# =============================================================================

WFC_CHUNK_SIZE = 3
# Window step used when extracting patterns. 1 = every position.
WFC_PATTERN_STRIDE = 1
WFC_INCLUDE_ROTATIONS = True
WFC_INCLUDE_MIRRORS = True
# Whole-attempt restarts before the builder gives up.
WFC_MAX_ATTEMPTS = 250
# Render the extracted pattern set into the history before solving.
WFC_RENDER_TILE_GALLERY = True

# =============================================================================
# SPAWNING
# =============================================================================

VORONOI_SEED_COUNT = 32
# Upper bound on the per-region spawn roll (1d(MAX_SPAWNS_PER_REGION + 3)).
MAX_SPAWNS_PER_REGION = 4

# =============================================================================
# LEVEL SELECTION
# =============================================================================

# Depths with a fixed pipeline. Every other depth picks one at random.
DEPTH_PIPELINES: dict[int, str] = {
    1: "rooms",
}
