# Este archivo permite ejecutar el servidor como módulo Python usando: python -m k3s_hello

"""
Entry point for running k3s-hello as a Python module.

Usage:
    python -m k3s_hello
"""

from .server import main

if __name__ == "__main__":
    main()
