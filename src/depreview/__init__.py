"""Review a package.json against the npm registry."""

__version__ = "0.1.0"
