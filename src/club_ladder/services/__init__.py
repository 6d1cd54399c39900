from .ladder import LadderService

__all__ = ["LadderService"]
