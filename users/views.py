# users/views.py - profile & user search

import logging

from django.contrib.auth import get_user_model
from django.db.models import Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import (
    ProfileSerializer,
    UpdateProfileSerializer,
    UserSearchSerializer,
    UserSummarySerializer,
)

User = get_user_model()
logger = logging.getLogger("teamboard.users")

SEARCH_LIMIT = 10


class UserViewSet(viewsets.GenericViewSet):
    """
    Current-user profile and user lookup (used to pick members/assignees).
    """
    queryset = User.objects.all()
    serializer_class = ProfileSerializer
    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=['get', 'patch'])
    def me(self, request):
        """
        GET   /api/users/me/  → profile with activity counts
        PATCH /api/users/me/  → partial update of profile fields
        """
        if request.method == 'PATCH':
            serializer = UpdateProfileSerializer(request.user, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            serializer.save()
            logger.info("User %s updated profile fields %s", request.user.id, sorted(serializer.validated_data))

        return Response(ProfileSerializer(request.user).data)

    @action(detail=False, methods=['get'])
    def search(self, request):
        """
        GET /api/users/search/?query=<text>
        Case-insensitive match on name or email, capped at SEARCH_LIMIT rows.
        """
        params = UserSearchSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        query = params.validated_data['query']

        users = (
            User.objects
            .filter(Q(name__icontains=query) | Q(email__icontains=query))
            .order_by('name', 'id')[:SEARCH_LIMIT]
        )
        return Response(UserSummarySerializer(users, many=True).data)
