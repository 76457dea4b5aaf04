class GridConfigurationError(RuntimeError):
    """Raised when a collection substrate cannot perform substring matching."""


class UnknownFieldError(AttributeError):
    """Raised when a field name cannot be resolved on a record type."""

    def __init__(self, record_type: type, name: str) -> None:
        super().__init__(f"{record_type.__name__!r} has no field {name!r}")
        self.record_type = record_type
        self.field_name = name
