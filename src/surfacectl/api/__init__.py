"""Control API: route tables, router, handler contract and transports."""

from .handlers import SurfaceHandlers, parse_query_bool
from .messages import APIRequest, APIResponse
from .router import Router, split_path
from .routes import RouteTable, build_v1_routes, build_v2_routes

__all__ = [
    "APIRequest",
    "APIResponse",
    "build_v1_routes",
    "build_v2_routes",
    "parse_query_bool",
    "Router",
    "RouteTable",
    "split_path",
    "SurfaceHandlers",
]
