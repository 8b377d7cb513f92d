"""Error taxonomy shared by the simulation services and the HTTP layer."""


class GameFeedError(Exception):
    """Base class for errors raised by the feed services."""

    code = 'GAMEFEED_ERROR'
    status_code = None

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class NotFound(GameFeedError):
    code = 'NOT_FOUND'
    status_code = 404


class PlayerNotFound(NotFound):
    code = 'PLAYER_NOT_FOUND'

    def __init__(self, player_id):
        super().__init__('Player not found')
        self.player_id = player_id


class CollaboratorUnavailable(GameFeedError):
    """An external service (the narrative generator) failed.

    Always recovered at the call site; never mapped to an HTTP response.
    """

    code = 'COLLABORATOR_UNAVAILABLE'
