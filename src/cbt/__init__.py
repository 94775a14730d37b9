"""
cbt-modules - module property generation for MSBuild.

Resolves module packages declared in dependency manifests and writes the
generated MSBuild fragments that import each module's build logic.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
