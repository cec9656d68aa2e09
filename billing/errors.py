# billing/errors.py


class BillingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BillingError):
    status_code = 404


class UnauthorizedError(BillingError):
    status_code = 401


class ValidationError(BillingError):
    status_code = 400


class ItemResolutionError(ValidationError):
    pass


class InvalidTransitionError(BillingError):
    status_code = 400
