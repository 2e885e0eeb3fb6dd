"""
Domain errors - typed failures surfaced by the core
"""


class BlogError(Exception):
    """Base class for all blog service errors"""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFoundError(BlogError):
    """Referenced post, comment or user does not exist"""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.resource_id = resource_id


class ForbiddenError(BlogError):
    """Actor is neither the owner of the resource nor an admin"""


class ValidationError(BlogError):
    """Missing or malformed input"""


class ConflictError(ValidationError):
    """Unique field (username, email) already taken"""


class AuthenticationError(BlogError):
    """Bad credentials or unusable access token"""


class CycleDetectedError(BlogError):
    """Comment parent chain loops back on itself"""

    def __init__(self, comment_id: str):
        super().__init__(f"Comment {comment_id} is part of a parent cycle")
        self.comment_id = comment_id


class PageSizeError(BlogError, ZeroDivisionError):
    """Page size must be a positive integer"""

    def __init__(self, limit: int):
        super().__init__(f"Page size must be greater than zero, got {limit}")
        self.limit = limit


class StorageError(BlogError):
    """Underlying read or write of a collection failed"""

    def __init__(self, collection: str, reason: str):
        super().__init__(f"Storage failure on '{collection}': {reason}")
        self.collection = collection
        self.reason = reason
