"""Core logic for a desktop ZIM reader: file locks, single instance, translations, zim:// URLs and tabs."""

__version__ = "2.3.1"

__all__ = ["lockedfile", "translation", "localpeer", "singleapp", "zimurl", "tabs"]