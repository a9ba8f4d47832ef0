"""Outbound link catalogs and reachability probes."""

from .auditor import LinkAuditor, build_http_client, check_app_store_link_format
from .catalog import EXACT_OK, REDIRECT_TOLERANT, LinkCatalog, LinkEntry, StatusRange, load_catalog

__all__ = [
    "EXACT_OK",
    "REDIRECT_TOLERANT",
    "LinkAuditor",
    "LinkCatalog",
    "LinkEntry",
    "StatusRange",
    "build_http_client",
    "check_app_store_link_format",
    "load_catalog",
]
