from fastapi import APIRouter, Depends, status
from app.dependencies import get_user_service
from app.schemas.user import UserCreate, UserUpdate, UserResponse
from app.services.users import UserService

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user_data: UserCreate, users: UserService = Depends(get_user_service)):
    """Register a new user. The password is stored as a bcrypt hash."""
    user = users.create(user_data.name, user_data.email, user_data.password, user_data.role)
    return UserResponse.model_validate(user)

@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, users: UserService = Depends(get_user_service)):
    return UserResponse.model_validate(users.get(user_id))

@router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: int, user_data: UserUpdate, users: UserService = Depends(get_user_service)):
    user = users.update(user_id, user_data.name, user_data.email, user_data.role)
    return UserResponse.model_validate(user)

@router.delete("/{user_id}")
def delete_user(user_id: int, users: UserService = Depends(get_user_service)):
    users.delete(user_id)
    return {"message": "User deleted successfully"}
