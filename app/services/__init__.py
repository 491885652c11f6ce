"""
Service layer for business logic implementation.
"""

from .auth import AuthService
from .user import UserService
from .property import PropertyService
from .room_request import RoomRequestService
from .subscription import SubscriptionService, AdminService
from .media import MediaService, public_id_from_url
from .error_handler import ErrorHandlerService
