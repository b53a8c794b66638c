# caimport/__init__.py

"""
CAImport - Certificate Authority Import
=======================================

This module provides tools for validating an externally produced CA identity
(private key, certificate bundle and CRL chain) and installing it into a CA's
on-disk storage location.
"""

# ---- Package metadata ----
__version__ = "0.9.0"
__title__ = "Certificate Authority Import"
__short_title__ = "CAImport"
__author__ = "Alex Ferrara <alex@wiredsquare.com>"
__license__ = "MIT"


# ---- Public exports ----
__all__ = [
    "__version__",
    "__title__",
    "__short_title__",
    "__author__",
    "__license__",
]
