"""Docker Compose process supervisor."""
from .supervisor import ComposeSupervisor

__all__ = ["ComposeSupervisor"]
