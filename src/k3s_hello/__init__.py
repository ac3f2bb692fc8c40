# Este archivo marca el paquete k3s_hello y expone la versión del proyecto.

"""
k3s-hello - minimal greeting HTTP server for K3s smoke tests.

Answers every request on :8080 with "Hello, K3s!".
"""

__version__ = "0.1.0"
__description__ = "Minimal HTTP server answering every request with a static greeting"

# Expose main components for easier imports
from .server import HelloServer, start, main

__all__ = ["HelloServer", "start", "main", "__version__"]
