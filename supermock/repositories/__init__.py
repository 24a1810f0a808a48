"""
Data Access Layer (Repository Pattern).

Each repository wraps one table, RPC family or the auth-admin API.
Services never touch a Supabase client directly.
"""

from supermock.repositories.base_repository import BaseRepository
from supermock.repositories.center_repository import CenterRepository
from supermock.repositories.identity_repository import IdentityRepository
from supermock.repositories.profile_repository import ProfileRepository
from supermock.repositories.review_repository import ReviewRepository
from supermock.repositories.student_repository import StudentRepository

__all__ = [
    "BaseRepository",
    "CenterRepository",
    "IdentityRepository",
    "ProfileRepository",
    "ReviewRepository",
    "StudentRepository",
]
