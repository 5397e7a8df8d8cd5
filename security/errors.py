class LoginError(Exception):
    """Base for every terminal login rejection."""

    code = "LOGIN_FAILED"
    status = 401
    message = "Login failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class IpBanned(LoginError):
    code = "IP_BANNED"
    status = 403
    message = "IP address is banned"


class RateLimited(LoginError):
    code = "RATE_LIMITED"
    status = 429
    message = "Too many failed attempts. IP banned for 24 hours."


class InvalidCredentials(LoginError):
    code = "INVALID_CREDENTIALS"
    status = 401
    message = "Invalid credentials"


class AccountBanned(LoginError):
    code = "ACCOUNT_BANNED"
    status = 403
    message = "Account is banned"


class IpNotAllowed(LoginError):
    code = "IP_NOT_ALLOWED"
    status = 403
    message = "IP address not allowed"
