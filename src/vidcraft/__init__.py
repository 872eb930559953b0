"""VidCraft AI - AI content studio for YouTube creators."""

__version__ = "0.1.0"
