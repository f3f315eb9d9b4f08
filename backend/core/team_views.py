from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import company_actor_or_error
from core.roles import API_FIELD_NAMES, ROLE_PERMISSIONS
from core.serializers import TeamMemberSerializer
from core import team as team_service

CAMEL_CASE_FLAGS = {field: key for key, field in API_FIELD_NAMES.items()}


def _team_and_actor(user, capability=None):
    actor, error = company_actor_or_error(user, capability)
    if error:
        return None, None, error
    return actor.company, actor, None


def _require_team_admin(user):
    return _team_and_actor(user, 'can_manage_team')


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def team_members(request):
    """List the company's team or invite a new member."""
    if request.method == "GET":
        company, _actor, error = _team_and_actor(request.user)
        if error:
            return error
        members = team_service.list_members(company)
        return Response({"teamMembers": TeamMemberSerializer(members, many=True).data})

    company, _actor, error = _require_team_admin(request.user)
    if error:
        return error
    payload = request.data or {}
    member = team_service.invite_member(
        company,
        payload.get('email'),
        payload.get('role'),
        name=payload.get('name') or '',
    )
    return Response(
        {"message": "Invitation sent successfully", "teamMember": TeamMemberSerializer(member).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET", "PATCH", "PUT", "DELETE"])
@permission_classes([IsAuthenticated])
def team_member_detail(request, member_id):
    if request.method == "GET":
        company, _actor, error = _team_and_actor(request.user)
        if error:
            return error
        member = team_service.get_member(company, member_id)
        return Response({"teamMember": TeamMemberSerializer(member).data})

    company, _actor, error = _require_team_admin(request.user)
    if error:
        return error

    if request.method == "DELETE":
        team_service.remove_member(company, member_id)
        return Response({"message": "Team member removed successfully"})

    member = team_service.update_member(company, member_id, request.data or {})
    return Response({"message": "Team member updated successfully", "teamMember": TeamMemberSerializer(member).data})


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def accept_team_invitation(request, member_id):
    member = team_service.accept_invitation(request.user, member_id)
    return Response({
        "message": f"You have joined {member.company.name}",
        "teamMember": TeamMemberSerializer(member).data,
    })


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def team_roles(request):
    """Default capabilities for each role, for the invite form."""
    roles = {
        role.value: {CAMEL_CASE_FLAGS[name]: value for name, value in caps.as_dict().items()}
        for role, caps in ROLE_PERMISSIONS.items()
    }
    return Response({"roles": roles})
