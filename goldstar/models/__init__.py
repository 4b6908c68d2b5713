# Import all models to register them with SQLModel
from goldstar.models.blog import BlogPost, BlogPostCreate, BlogPostUpdate
from goldstar.models.booking import BookingRequest, QuickBookingRequest

__all__ = [
    "BlogPost",
    "BlogPostCreate",
    "BlogPostUpdate",
    "BookingRequest",
    "QuickBookingRequest",
]
