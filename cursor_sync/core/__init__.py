from .config import settings, get_settings
from .error_handlers import CursorSyncError, ArbitrationError

__all__ = ["settings", "get_settings", "CursorSyncError", "ArbitrationError"]
