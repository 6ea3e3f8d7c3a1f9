"""Dependency resolvers, one per ecosystem."""

from depscope.resolvers.base import DependencyResolver
from depscope.resolvers.npm import NpmResolver
from depscope.resolvers.pypi import PyPIResolver, parse_requires_dist
from depscope.resolvers.registry import ResolverRegistry, default_registry

__all__ = [
    "DependencyResolver",
    "NpmResolver",
    "PyPIResolver",
    "ResolverRegistry",
    "default_registry",
    "parse_requires_dist",
]
