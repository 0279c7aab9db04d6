"""
garoon_cli: a small command line client for the Cybozu Garoon SOAP API.
"""

__version__ = "0.1.0"
