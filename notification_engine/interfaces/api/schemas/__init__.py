from .notification import NotificationClientMessage, NotificationInit, NotificationRead

__all__ = ["NotificationClientMessage", "NotificationInit", "NotificationRead"]
