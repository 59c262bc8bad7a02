from xlcell.config.settings import Settings

__all__ = ["Settings"]
