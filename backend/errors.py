# backend/errors.py


class DealContextError(RuntimeError):
    """Base class for failures while building a deal's AI context."""


class DealContextFetchError(DealContextError):
    """The persistence layer failed while reading context records."""


class DealContextConsistencyError(DealContextError):
    """
    The deal passed the ownership probe but the full record could not be
    read right after. Points at a race or an integrity problem, not at the
    caller.
    """


class ContextFormatError(ValueError):
    """Required data was missing when rendering a context for a prompt."""


class LLMError(RuntimeError):
    pass


class LLMAuthenticationError(LLMError):
    pass
