# designz_loader/core/events.py
import json
import logging

from redis.exceptions import RedisError

from designz_loader.core.redis import redis_client

logger = logging.getLogger(__name__)


def session_channel(session_id: int) -> str:
    return f"bulk-upload:{session_id}"


async def publish_session_event(session_id: int, payload: dict, client=None):
    client = client or redis_client
    try:
        await client.publish(session_channel(session_id), json.dumps(payload))
    except (RedisError, OSError) as e:
        logger.warning(f"Could not publish event for session {session_id}: {e}")
