"""shields.io endpoint badges for package versions and CI test results."""

__version__ = "0.3.0"
