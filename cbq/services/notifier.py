"""Desktop notifications"""

from plyer import notification
from loguru import logger


class Notifier:
    """Shows short desktop notifications when enabled"""

    def __init__(self, enabled: bool = True, app_name: str = "CBQ", timeout: int = 3):
        self.enabled = enabled
        self.app_name = app_name
        self.timeout = timeout

    def notify(self, title: str, message: str) -> None:
        """
        Show system notification

        Args:
            title: Notification title
            message: Notification message
        """
        if not self.enabled:
            return

        try:
            notification.notify(
                title=title,
                message=message,
                app_name=self.app_name,
                timeout=self.timeout
            )
            logger.debug(f"Notification shown: {title}")
        except Exception as e:
            # plyer raises backend-specific errors (NotImplementedError, dbus errors, ...)
            logger.warning(f"Failed to show notification: {e}")
