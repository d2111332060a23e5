"""
rtest Runner Package.

Invocation of the external test command.
Requires Python 3.11+.
"""

from rtest.runner.invoker import TestInvoker
from rtest.runner.trigger import ManualTriggerReader

__all__ = ["TestInvoker", "ManualTriggerReader"]
