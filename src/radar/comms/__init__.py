"""Event plumbing between the radar engine and the dashboard shell."""

from radar.comms.event_bus import EventBus
from radar.comms.notifications import Notification, NotificationLog

__all__ = ["EventBus", "Notification", "NotificationLog"]
