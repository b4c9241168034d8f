"""Wallet host message channel."""

from walletbridge.host.channel import HostChannel
from walletbridge.host.protocol import HostFrame, LogFrame
from walletbridge.host.sinks import CallbackSink, HostSink, QueueSink, install_log_forwarding

__all__ = [
    "HostChannel",
    "HostFrame",
    "LogFrame",
    "HostSink",
    "CallbackSink",
    "QueueSink",
    "install_log_forwarding",
]
