class AccessDenied(Exception):
    pass


class ConflictError(Exception):
    pass


class InvalidCredentials(Exception):
    pass
