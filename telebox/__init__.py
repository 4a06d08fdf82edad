"""telebox - drive a chat account from its own messages."""

__version__ = "0.3.0"
__logo__ = "📦"
