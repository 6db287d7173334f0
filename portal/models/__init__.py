# portal/models/__init__.py

from .. import db  # Import the SQLAlchemy instance from the portal package

# Import all models to ensure they're registered with SQLAlchemy
from portal.models.content import (
    BusinessCategory,
    Business,
    Event,
    ForumCategory,
    ForumPost,
    BulletinCategory,
    BulletinPost,
    PetAlert,
    CleanlinessReportType,
    CleanlinessReport,
    Factcheck,
    TrafficLocation,
    TrafficStatus,
)
from portal.models.user import User

__all__ = [
    'BusinessCategory',
    'Business',
    'Event',
    'ForumCategory',
    'ForumPost',
    'BulletinCategory',
    'BulletinPost',
    'PetAlert',
    'CleanlinessReportType',
    'CleanlinessReport',
    'Factcheck',
    'TrafficLocation',
    'TrafficStatus',
    'User',
]
