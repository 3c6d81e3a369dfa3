"""
Embedded default flare.file.

Used when no script file is available. It only establishes the run-wide
kubeconfig so the run can still produce an archive without a cluster.
"""

DEFAULT_SCRIPT_TEMPLATE = """\
# Default flare.file: no script file was found, so only the local
# kubeconfig is registered for this run.
kube_config(path={path!r})
"""


def default_script_body(kubeconfig_path: str) -> str:
    """Render the default script for the given kubeconfig path."""
    return DEFAULT_SCRIPT_TEMPLATE.format(path=kubeconfig_path)
