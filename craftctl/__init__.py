"""craftctl - lifecycle controller for a Docker Compose managed Minecraft server."""

__version__ = "0.1.0"
