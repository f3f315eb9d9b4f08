from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.notifications import build_notification_service
from core.serializers import NotificationSerializer

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def notifications(request):
    """
    GET: the caller's feed, newest first (page, limit, unreadOnly).
    POST: create a notification for a user.
    DELETE: clear the caller's feed.
    """
    service = build_notification_service()

    if request.method == 'GET':
        params = request.query_params
        result = service.list(
            request.user.pk,
            page=_int_param(params.get('page'), 1),
            limit=_int_param(params.get('limit'), 20),
            unread_only=str(params.get('unreadOnly', '')).lower() in TRUE_VALUES,
        )
        return Response(result)

    if request.method == 'DELETE':
        deleted = service.clear(request.user.pk)
        return Response({'message': 'All notifications cleared', 'deleted': deleted})

    payload = request.data or {}
    notification = service.create(
        payload.get('userId'),
        payload.get('type'),
        payload.get('title'),
        payload.get('message'),
        data=payload.get('data'),
        action_url=payload.get('actionUrl'),
    )
    return Response({'notification': NotificationSerializer(notification).data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def notification_detail(request, notification_id):
    service = build_notification_service()
    if request.method == 'GET':
        notification = service.get(request.user.pk, notification_id)
    elif request.method == 'PATCH':
        notification = service.mark_read(request.user.pk, notification_id)
    else:
        service.delete(request.user.pk, notification_id)
        return Response({'message': 'Notification deleted'})
    return Response({'notification': NotificationSerializer(notification).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_count(request):
    return Response({'unreadCount': build_notification_service().unread_count(request.user.pk)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_all_notifications_read(request):
    updated = build_notification_service().mark_all_read(request.user.pk)
    return Response({'message': 'All notifications marked as read', 'updated': updated, 'unreadCount': 0})


def _int_param(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
