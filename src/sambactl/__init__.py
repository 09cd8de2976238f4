"""sambactl — Samba AD DC administration through samba-tool."""

__version__ = "0.1.0"
