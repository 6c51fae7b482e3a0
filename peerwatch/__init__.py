"""peerwatch: live first-contact log of a process's remote peers."""

__version__ = "0.1.0"
