"""Client-side cache for remotely hosted ConfigCat configuration documents."""

__version__ = "1.0.0"
