"""Product catalog API with a switchable delayed/immediate execution mode.

This package contains the HTTP surface, the product service and repository,
the execution mode controller and the runtime configuration they share.
"""

__version__ = "0.1.0"
