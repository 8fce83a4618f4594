"""
Transports for signed upload requests.
"""

from tracebin.senders.base import RequestSender, truncate_file
from tracebin.senders.curl import CurlRequestSender
from tracebin.senders.urllib_sender import UrllibRequestSender

__all__ = [
    "RequestSender",
    "CurlRequestSender",
    "UrllibRequestSender",
    "truncate_file",
]
