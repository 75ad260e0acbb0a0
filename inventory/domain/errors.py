# inventory/domain/errors.py


class StorageError(Exception):
    """Storage engine failure (I/O, closed handle, engine error)."""


class StorageInitError(StorageError):
    """Database container could not be constructed (corrupt file, schema mismatch, permissions)."""


class ConstraintViolation(StorageError):
    """A write broke a schema constraint, e.g. duplicate primary key under the reject policy."""
