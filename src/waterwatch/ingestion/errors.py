class WaterDataError(Exception):
    pass


class NetworkFailure(WaterDataError):
    """A live source timed out, was unreachable, or answered with a non-200 status."""


class ValidationFailure(WaterDataError):
    """An upstream payload or cache snapshot does not decode into the expected shape."""


class NotFoundError(WaterDataError):
    pass


class ConfigurationError(WaterDataError):
    pass
