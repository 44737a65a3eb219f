"""Error taxonomy shared by the service layer.

Services raise these before touching any row; the API blueprint turns
them into JSON responses with the matching status code. Plain input
problems (empty comment, unknown column type) stay ValueError.
"""


class BoardError(Exception):
    """Base for access and lookup failures."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticated(BoardError):
    status_code = 401
    default_message = "Not authenticated"


class NotAuthorized(BoardError):
    status_code = 403
    default_message = "Not authorized"


class NotFound(BoardError):
    status_code = 404
    default_message = "Not found"
