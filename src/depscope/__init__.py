"""depscope — dependency network and vulnerability explorer.

Parses a dependency manifest, resolves its transitive dependencies level by
level against the ecosystem's registry, and annotates every package with
known vulnerabilities.
"""

__version__ = "0.1.0"
