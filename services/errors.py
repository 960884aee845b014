"""
Error Taxonomy

Every recipe and catalog operation either succeeds or raises exactly one of
these, before anything is written. The Flask layer turns them into
{"error": message} responses using status_code.
"""


class RecipeError(Exception):
    """Base class for all store errors."""
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class NotFoundError(RecipeError):
    """Referenced recipe or ingredient does not exist."""
    status_code = 404


class AuthorizationError(RecipeError):
    """Caller is not the owner of the recipe."""
    status_code = 403


class ConflictError(RecipeError):
    """(owner, title) is already taken."""
    status_code = 409


class ValidationError(RecipeError):
    """Malformed input."""
    status_code = 400


class InvariantError(RecipeError):
    """Operation would leave a recipe with neither link nor description."""
    status_code = 409
