import logging
from typing import Optional

from fastapi import Header

logger = logging.getLogger(__name__)


async def get_actor_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """
    Id of the admin performing the request, used to attribute activity entries.

    Authentication happens upstream (the hosted auth provider in front of this
    API forwards the verified user id); requests without it are recorded
    without an actor.
    """
    if not x_user_id:
        logger.debug("No X-User-Id header, activity will be recorded without an actor")
        return None
    return x_user_id.strip() or None
