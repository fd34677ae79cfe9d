"""ARForge — text, logo and photo inputs to shareable AR-ready GLB assets."""

__version__ = "0.1.0"
