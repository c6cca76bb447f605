import logging

from django.contrib.auth import authenticate
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
from .serializers import LoginSerializer, RegisterSerializer
from .tokens import create_token

logger = logging.getLogger(__name__)


def token_for(user):
    return create_token({"user_id": user.pk, "username": user.username})


@api_view(['POST'])
def register(request):
    """
    POST /auth/register {username, password, email?}
    Create the user and return {"token": ...} with 201.
    """
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {"error": "Validation failed", "details": serializer.errors},
            status=status.HTTP_400_BAD_REQUEST,
        )
    user = serializer.save()
    logger.info("Registered user %s", user.username)
    return Response({"token": token_for(user)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
def login(request):
    """
    POST /auth/token {username, password}
    Return {"token": ...} or 401 on bad credentials.
    """
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {"error": "Validation failed", "details": serializer.errors},
            status=status.HTTP_400_BAD_REQUEST,
        )
    user = authenticate(
        username=serializer.validated_data["username"],
        password=serializer.validated_data["password"],
    )
    if user is None:
        logger.info("Rejected login for %s", serializer.validated_data["username"])
        return Response({"error": "Invalid username/password"}, status=status.HTTP_401_UNAUTHORIZED)
    return Response({"token": token_for(user)})
