"""
Fiducial SLAM constants.

All magic numbers are centralized here with clear documentation.
"""

import math

# =============================================================================
# Variance (confidence proxy) Constants
# =============================================================================

# Floor of the harmonic-mean variance fusion; fused variance never reaches 0
VARIANCE_FLOOR = 1e-6

# Floor applied to the source landmark variance when placing a co-observed
# landmark (an anchor source still contributes some uncertainty)
SOURCE_VARIANCE_FLOOR = 1e-4

# Variance that marks a pinned anchor
ANCHOR_VARIANCE = 0.0

# =============================================================================
# Auto-initialization Constants
# =============================================================================

# Frames spent fusing the origin landmark before it is pinned
AUTO_INIT_FRAMES_DEFAULT = 10

# =============================================================================
# Detector Axis Convention
# =============================================================================

# ArUco: y forward, x right. Map frame (REP-103): x forward, y left.
# Rotating 90 degrees about Z reconciles the two.
DETECTOR_AXIS_CORRECTION_YAW = math.pi / 2.0

# =============================================================================
# Visualization Constants
# =============================================================================

# Minimum wall-clock seconds between non-forced marker refreshes of a landmark
MARKER_REFRESH_PERIOD_DEFAULT = 1.0

# Flattened cube edge length (meters) and thickness
MARKER_SIZE_DEFAULT = 0.15
MARKER_THICKNESS = 0.01

# Marker id offsets per namespace (the cube uses the landmark id itself)
MARKER_ID_OFFSET_SIGMA = 10000
MARKER_ID_OFFSET_TEXT = 30000
MARKER_ID_OFFSET_LINKS = 40000
MARKER_ID_RAY_START = 60000

# Line widths (meters)
LINK_LINE_WIDTH = 0.02
RAY_LINE_WIDTH = 0.01
TEXT_HEIGHT = 0.1

# =============================================================================
# Persistence Constants
# =============================================================================

# id x y z roll pitch yaw variance observation_count
MAP_RECORD_FIELDS = 9

# Decimal places written for float fields
MAP_FLOAT_DECIMALS = 9

DEFAULT_MAP_FILE = "~/.ros/slam/map.txt"

# =============================================================================
# Node Constants
# =============================================================================

STATUS_CHECK_PERIOD_DEFAULT = 5.0
