"""
Exception classes for FocusReader.

All FocusReader exceptions inherit from FocusReaderError,
making it easy to catch all library errors.

Only ConfigurationError reaches callers. The other exceptions are
raised inside the engine and converted to empty results at the
operation boundary, so a failing page never crashes the host.

Example:
    >>> try:
    ...     config = ReaderConfig(progress=ProgressConfig(expiry_days=0))
    ... except focusreader.ConfigurationError as e:
    ...     print(f"Bad config: {e}")
"""


class FocusReaderError(Exception):
    """
    Base exception for all FocusReader errors.

    Catch this to handle any FocusReader-specific error.
    """

    pass


class ConfigurationError(FocusReaderError, ValueError):
    """
    Raised for invalid configuration.

    Example:
        >>> AnnotationConfig(vocabulary_batch_limit=0)
        ConfigurationError: vocabulary_batch_limit must be >= 1, got 0
    """

    pass


class ExtractionEmpty(FocusReaderError):
    """
    Raised when no qualifying content root exists in a document.

    ContentExtractor.extract() catches this and returns None.
    """

    pass


class CollaboratorError(FocusReaderError):
    """
    Raised when the text-inference collaborator fails or answers with an error.

    The Annotator records the message and skips the batch; the affected
    terms stay out of the cache and are asked again on the next call.
    """

    pass


class StoreUnavailable(FocusReaderError):
    """
    Raised when the persistent key-value store cannot be read or written.

    The Progress Store degrades the current tick to a no-op.
    """

    pass
