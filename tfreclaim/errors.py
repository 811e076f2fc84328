"""
Exceptions raised by tfreclaim.

Validation errors mean the caller handed in bad input and should not retry.
DuplicateKeyError is the one recoverable case: the importer derives another
resource name and writes again.
"""


class TfreclaimError(Exception):
    pass


class ValidationError(TfreclaimError):
    pass


class RequiredKeyError(ValidationError):
    def __init__(self, msg: str = "the key is required"):
        super().__init__(msg)


class RequiredValueError(ValidationError):
    def __init__(self, msg: str = "the value is required"):
        super().__init__(msg)


class InvalidKeyError(ValidationError):
    pass


class InvalidTypeError(ValidationError):
    pass


class UnsupportedResourceError(ValidationError):
    pass


class DuplicateKeyError(TfreclaimError):
    pass


class NotFoundError(TfreclaimError):
    pass


class EncodingError(TfreclaimError):
    pass
