from .services import SingleNumberReachService
from .naming import profile_name_for, destination_name_for

__all__ = [
    "SingleNumberReachService",
    "profile_name_for",
    "destination_name_for",
]
