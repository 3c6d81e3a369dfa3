"""
Flare - Scripted Kubernetes Diagnostics Collection

Runs a declarative flare.file against a cluster and packages the
collected evidence into a compressed archive.

Architecture:
- Each module is self-contained with clear interfaces
- Built-ins share run-scoped state only through the execution context
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- context: Run-scoped state shared across built-in invocations
- builtins: Built-in registry, invocation protocol and kube_config resolver
- script: Directive model and flare.file parser
- engine: Sequential directive execution
- archive: Evidence packaging
"""

__version__ = "0.1.0"
