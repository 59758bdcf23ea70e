"""FiduCam - Capture de justificatifs pour clients de fiduciaire."""

__version__ = "0.1.0"
