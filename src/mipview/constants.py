"""
mipview - Constants and Configuration Defaults

This module contains all constant values used throughout the application:
- Canonical square size ceiling
- Render parameter defaults and ranges
- GL render state defaults
- Mip generation strategies and filter modes
- Export naming
"""

# ======================================================================
# CANONICAL SQUARE SIZE
# ======================================================================
# Canonical buffers are square with a power-of-two side, never larger than
# SQUARE_MAX_LENGTH. Larger sources are downscaled to the ceiling.

SQUARE_MAX_POWER = 11
SQUARE_MAX_LENGTH = 2 ** SQUARE_MAX_POWER  # 2048

# Hard limit accepted from user configuration (2^15 = 32768)
MAX_CONFIGURABLE_POWER = 15

# ======================================================================
# RENDER PARAMETERS
# ======================================================================

DEFAULT_PREVIEW_SCALE = 0.5
MIN_PREVIEW_SCALE = 0.5
MAX_PREVIEW_SCALE = 4.0

# Geometry scale range is (0, 1]: zero is excluded
DEFAULT_GEOMETRY_SCALE = 1.0
MAX_GEOMETRY_SCALE = 1.0

DEFAULT_MIP_BIAS = 0.0

# Accepted parameter names -> canonical attribute names
PARAMETER_ALIASES = {
    'preview_scale': 'preview_scale',
    'previewScale': 'preview_scale',
    'scale': 'preview_scale',
    'geometry_scale': 'geometry_scale',
    'geometryScale': 'geometry_scale',
    'mip_bias': 'mip_bias',
    'mipBias': 'mip_bias',
    'bias': 'mip_bias',
}

# ======================================================================
# GL RENDER STATE
# ======================================================================

DEFAULT_CLEAR_COLOR = (0.5, 0.5, 0.5, 1.0)
DEFAULT_TEXTURE_UNIT = 0

# Full-screen quad: two triangles covering clip space
QUAD_POSITIONS = [
    -1.0,  1.0,
     1.0,  1.0,
    -1.0, -1.0,
     1.0, -1.0,
]
QUAD_INDICES = [0, 2, 1, 1, 2, 3]
QUAD_INDEX_COUNT = 6

MAIN_VERTEX_SHADER = 'main.vert'
MAIN_FRAGMENT_SHADER = 'main.frag'

# ======================================================================
# MIP GENERATION
# ======================================================================

MIP_STRATEGY_CPU = 'cpu'            # halve on the CPU, upload every level
MIP_STRATEGY_HARDWARE = 'hardware'  # glGenerateMipmap from the base level
MIP_STRATEGIES = (MIP_STRATEGY_CPU, MIP_STRATEGY_HARDWARE)
DEFAULT_MIP_STRATEGY = MIP_STRATEGY_CPU

FILTER_LINEAR = 'linear'
FILTER_NEAREST = 'nearest'
FILTER_MODES = (FILTER_LINEAR, FILTER_NEAREST)
DEFAULT_FILTER_MODE = FILTER_LINEAR

# ======================================================================
# LOADING / EXPORT
# ======================================================================

DEFAULT_LOAD_TIMEOUT = 30.0  # seconds

DEFAULT_EXPORT_FORMAT = 'png'
LEVEL_SUFFIX_WIDTH = 2  # photo-03.png
DEFAULT_OUTPUT_DIR = 'exports'

CONFIG_DIR_NAME = '.mipview'
CONFIG_FILE_NAME = 'config.json'
