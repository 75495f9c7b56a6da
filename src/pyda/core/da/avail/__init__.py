"""
Avail data availability backend.
"""

from pyda.core.da.avail.client import AvailClient, SUBMITTED_DA_HEIGHT
from pyda.core.da.avail.config import AvailConfig
from pyda.core.da.avail.datasubmit import DataSubmitter
from pyda.core.da.avail.types import AppData, Confidence

__all__ = [
    "AvailClient",
    "AvailConfig",
    "AppData",
    "Confidence",
    "DataSubmitter",
    "SUBMITTED_DA_HEIGHT",
]
