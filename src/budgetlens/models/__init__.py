"""SQLModel table exports."""

from .settings import AppSetting

__all__ = ["AppSetting"]
