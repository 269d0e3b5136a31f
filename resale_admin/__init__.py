"""Administrative console for the ticket resale workflow."""

__version__ = "0.1.0"
