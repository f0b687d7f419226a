"""
Fiducial SLAM: landmark-map fusion and observer pose estimation from
repeated fiducial detections.
"""

__version__ = "0.1.0"
