"""
Real-time push channel.

Services receive a ``PushNotifier`` rather than reaching for a shared client,
so tests can pass a recording double. ``RedisPushNotifier`` publishes JSON
events on per-user / per-thread pub/sub channels that a websocket gateway
fans out to browsers.
"""
import json
import logging
from typing import Any, Dict, List, Tuple

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction
from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def user_topic(user_id) -> str:
    return f"user-{user_id}"


def thread_topic(thread_id) -> str:
    return f"thread-{thread_id}"


class PushNotifier:
    """Interface for delivering events to connected clients."""

    enabled = True

    def publish(self, topic: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class NullPushNotifier(PushNotifier):
    """Used when no real-time channel is configured."""

    enabled = False

    def publish(self, topic, event, payload):
        logger.debug('Real-time channel disabled; dropping %s on %s', event, topic)


class RedisPushNotifier(PushNotifier):
    def __init__(self, client: Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> 'RedisPushNotifier':
        return cls(Redis.from_url(url))

    def publish(self, topic, event, payload):
        message = json.dumps({'event': event, 'data': payload}, cls=DjangoJSONEncoder)
        try:
            self.client.publish(topic, message)
        except RedisError as exc:
            raise PushError(f'Failed to publish {event} on {topic}: {exc}') from exc


class RecordingPushNotifier(PushNotifier):
    """Keeps published events in memory; handy for tests and local debugging."""

    def __init__(self):
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    def publish(self, topic, event, payload):
        self.events.append((topic, event, payload))

    def events_for(self, topic):
        return [(event, payload) for t, event, payload in self.events if t == topic]


class QueuedPushNotifier(PushNotifier):
    """Hands each event to a Celery worker which publishes it to Redis."""

    def publish(self, topic, event, payload):
        from core.tasks import publish_realtime_event

        publish_realtime_event.delay(topic, event, to_json_safe(payload))


class PushError(Exception):
    pass


def to_json_safe(payload):
    return json.loads(json.dumps(payload, cls=DjangoJSONEncoder))


def get_push_notifier() -> PushNotifier:
    """Build the notifier configured for this process."""
    if not getattr(settings, 'REALTIME_REDIS_URL', ''):
        return NullPushNotifier()
    return QueuedPushNotifier()


def publish_after_commit(notifier: PushNotifier, topic: str, event: str, payload: Dict[str, Any]) -> None:
    """Publish once the surrounding transaction commits; failures are logged only."""
    if not notifier.enabled:
        return

    def _publish():
        try:
            notifier.publish(topic, event, payload)
        except Exception:
            logger.exception('Real-time push of %s to %s failed', event, topic)

    transaction.on_commit(_publish)
