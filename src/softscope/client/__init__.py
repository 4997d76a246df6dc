"""
softscope Client Module.

Contains the data-access client, model delegates, and hook registration.
"""

from softscope.client.client import DataClient, ModelDelegate
from softscope.client.hooks import ALL_OPERATIONS, Handler, LoggingHook, QueryHook

__all__ = [
    "DataClient",
    "ModelDelegate",
    "QueryHook",
    "LoggingHook",
    "Handler",
    "ALL_OPERATIONS",
]
