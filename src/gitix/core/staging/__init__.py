"""
Staging index control.

Example:
    >>> from gitix.core.staging import StagingController
    >>> StagingController().stage("README.md")
"""

from gitix.core.staging.models import StagingReport
from gitix.core.staging.service import StagingController

__all__ = ["StagingController", "StagingReport"]
