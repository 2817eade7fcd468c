class DispatchError(ValueError):
    """Base class for invariant violations raised while building domain objects."""


class InvalidWorkOrderError(DispatchError):
    pass


class InvalidScheduleDateError(DispatchError):
    pass


class InvalidTimeSlotError(DispatchError):
    pass


class BookingAlreadyCompletedError(DispatchError):
    pass


class BookingNotFoundError(DispatchError):
    pass


class WorkerUnavailableError(DispatchError):
    pass


class InvalidStatusTransitionError(DispatchError):
    pass
