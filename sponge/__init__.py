"""Byte streams, stream reassembly, network-order parsing, and descriptor, socket and event-loop helpers."""

__version__ = "0.1.0"

__all__ = [
    "address",
    "buffer",
    "byte_stream",
    "eventloop",
    "file_descriptor",
    "parser",
    "sockets",
    "stream_reassembler",
    "util",
]