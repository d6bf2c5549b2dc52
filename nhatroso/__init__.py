"""Identity and session backend for the nhatroso room-rental manager."""

__version__ = "0.1.0"
