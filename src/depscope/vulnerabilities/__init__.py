"""Vulnerability annotators."""

from depscope.vulnerabilities.base import NullAnnotator, VulnerabilityAnnotator
from depscope.vulnerabilities.osv import OSVAnnotator, parse_osv_vulnerability

__all__ = [
    "NullAnnotator",
    "OSVAnnotator",
    "VulnerabilityAnnotator",
    "parse_osv_vulnerability",
]
