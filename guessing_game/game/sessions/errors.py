class GuessingGameError(Exception):
    pass


class InvalidGameOptionsError(GuessingGameError):
    pass


class ContentSourceError(GuessingGameError):
    pass


class BuildFailureError(GuessingGameError):
    pass


class SessionNotStartedError(GuessingGameError):
    pass


class SessionNotCompletedError(GuessingGameError):
    pass


class CorruptSavedGameError(GuessingGameError):
    pass


class SavedGameBusyError(GuessingGameError):
    pass
