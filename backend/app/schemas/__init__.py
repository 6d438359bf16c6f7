from app.schemas.user import UserCreate, UserResponse, SignIn, SignInResponse
from app.schemas.booking import BookingBody, BookingResponse, BookingIdResponse, RoomResponse

__all__ = [
    "UserCreate", "UserResponse", "SignIn", "SignInResponse",
    "BookingBody", "BookingResponse", "BookingIdResponse", "RoomResponse",
]
