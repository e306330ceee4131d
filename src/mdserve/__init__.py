"""mdserve — serve a Markdown file as GitHub-styled HTML with live reload.

Render one local document, serve it over HTTP, and (optionally) reload every
open browser tab after each settled save.

Quick start::

    import mdserve

    mdserve.serve("README.md", watch=True)

Built on:

    pounce      ASGI server        (serves the app)
    chirp       Web framework      (routes, SSE)
    kida        Template engine    (page shell)
    patitas     Markdown parser    (renders the document)
    rosettes    Syntax highlighter (highlights code)
    watchfiles  File watching      (detects saves)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "ReloadCoordinator",
    "ServeConfig",
    "__version__",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import mdserve`` fast; the server stack loads on first use.
    """
    if name == "ServeConfig":
        from mdserve.config import ServeConfig

        return ServeConfig

    if name == "ReloadCoordinator":
        from mdserve.reactive.coordinator import ReloadCoordinator

        return ReloadCoordinator

    if name == "serve":
        from mdserve.app import serve

        return serve

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
