import logging
from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError

from finledger.models.schemas.notification import Notification
from finledger.services.storage import save_version

logger = logging.getLogger(__name__)

# notify(owner_id, title, body, deep_link) -> delivered?
Notifier = Callable[[str, str, str, str | None], bool]


def notify(user_id: str, title: str, body: str, link: str | None = None) -> bool:
    """Drop a message into the owner's inbox. Delivery problems are logged, not raised."""
    try:
        save_version(
            Notification(user_id=str(user_id), title=title, body=body, link=link),
            "notifications",
            "notification_id",
        )
        return True
    except (ClientError, BotoCoreError) as e:
        logger.warning("notify failed for %s: %s", user_id, e)
        return False
