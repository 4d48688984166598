# Services package

from .destination import is_local_url
from .forwarding_executor import ForwardingExecutor, create_http_client, execute_request
from .bulk_executor import execute_all, build_report, run_bulk
from .request_store import RequestStore

__all__ = [
    "is_local_url",
    "ForwardingExecutor",
    "create_http_client",
    "execute_request",
    "execute_all",
    "build_report",
    "run_bulk",
    "RequestStore",
]
