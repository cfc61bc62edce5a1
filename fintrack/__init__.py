"""Mini README: Core package initializer for FinTrack.

FinTrack is a single-user personal finance tracker. The ``finance``
package owns the transaction store, ``storage`` persists it, and
``interface`` exposes it over HTTP. Only the logging helper is imported
here so that importing the package stays free of web dependencies.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
