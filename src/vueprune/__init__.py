"""
vueprune - find unused components, assets and code files in a Vue project

Simple API:

    from vueprune import analyze_project

    result = analyze_project("my-vue-app")
    print(result.report.unused_components)
    print(result.report.unused_assets)
"""


def analyze_project(*args, **kwargs):
    """Lazy import wrapper for analyze_project to keep package import light."""
    from .api import analyze_project as _analyze_project

    return _analyze_project(*args, **kwargs)


from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("vueprune")
except PackageNotFoundError:
    # Fallback for development/uninstalled package
    __version__ = "unknown"

__all__ = ["analyze_project", "__version__"]
