# =======================================================================================
# qrbadge/api/routes/users.py - User Management Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, status
from ...models.schemas import (
    CreateUserRequest, LoginRequest, LoginResponse, MessageResponse,
    UpdateUserRequest, UserListResponse, UserResponse,
)
from ...services import UserService
from ..dependencies import get_user_service, require_auth

public_router = APIRouter()
router = APIRouter(dependencies=[Depends(require_auth)])


@public_router.post("/users/login", response_model=LoginResponse)
def login(body: LoginRequest, users: UserService = Depends(get_user_service)):
    user, token = users.login(body.email, body.password)
    return LoginResponse(user=user, token=token)


@router.get("/users", response_model=UserListResponse)
def list_users(users: UserService = Depends(get_user_service)):
    items = users.list_users()
    return UserListResponse(count=len(items), users=items)


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, users: UserService = Depends(get_user_service)):
    return UserResponse(user=users.get_user(user_id))


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(body: CreateUserRequest, users: UserService = Depends(get_user_service)):
    user = users.create_user(body.name, body.email, body.password, body.role)
    return UserResponse(user=user)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(user_id: int, body: UpdateUserRequest, users: UserService = Depends(get_user_service)):
    user = users.update_user(
        user_id, name=body.name, email=body.email, password=body.password, role=body.role
    )
    return UserResponse(user=user)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, users: UserService = Depends(get_user_service)):
    users.delete_user(user_id)
    return MessageResponse(message="Utilisateur supprimé avec succès")
