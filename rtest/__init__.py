"""
rtest.

Continuous test re-runner driven by file system events.
Requires Python 3.11+.
"""

__version__ = "0.1.0"
