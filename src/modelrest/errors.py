"""Error taxonomy for modelrest."""


class ModelRestError(Exception):
    """Base exception for request-level errors raised by modelrest."""

    pass


class MetadataError(ModelRestError):
    """Raised when entity or view metadata is invalid at load time."""

    pass


class InvalidFilterColumn(ModelRestError):
    """Raised when a filter predicate references an unknown column."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"column does not exist: {column}")


class InvalidFilterCondition(ModelRestError):
    """Raised when a filter condition is not in the vocabulary."""

    def __init__(self, condition: str):
        self.condition = condition
        super().__init__(f"invalid filter condition {condition}")


class ObjectNotFound(ModelRestError):
    """Raised when a primary-key lookup matches no row."""

    def __init__(self, table: str = ""):
        self.table = table
        super().__init__("object does not exist")


class UnknownEntity(ModelRestError):
    """Raised when a table or entity name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown entity: {name}")


class ViewNotFound(ModelRestError):
    """Raised when an entity has no list view declared."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no filter view declared for {name}")
