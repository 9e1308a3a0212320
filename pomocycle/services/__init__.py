"""Platform collaborators: notifications and haptics."""

from .haptics import HapticsService, ImpactStyle, NotificationType
from .notifications import NotificationService

__all__ = [
    "HapticsService",
    "ImpactStyle",
    "NotificationType",
    "NotificationService",
]
