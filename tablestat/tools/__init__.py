"""Request tools for tablestat.

This module contains:
- run_request: Validate and execute an analysis request against a table
"""

from tablestat.tools.runner import RequestResult, run_request

__all__ = [
    "run_request",
    "RequestResult",
]
