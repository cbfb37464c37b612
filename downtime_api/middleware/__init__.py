"""
Middleware package for request logging
"""
from .request_logging import logging_middleware

__all__ = ["logging_middleware"]
