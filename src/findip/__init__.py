"""findip - find and report the public IP address of this machine."""

__version__ = "1.0.0"
