"""Errors raised by the data-access stores"""


class PersistenceError(Exception):
    """A call to the backing store failed"""


class RecordNotFound(PersistenceError):
    """The identity is unknown to the backing store"""

    def __init__(self, model_name, object_id):
        self.model_name = model_name
        self.object_id = object_id
        super().__init__(f"{model_name} {object_id} not found")
