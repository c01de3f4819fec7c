"""Error taxonomy shared by the retrieval and generation layers."""


class SanadError(Exception):
    """Base class for errors raised by Sanad components."""


class EmbeddingUnavailable(SanadError):  # noqa: N818
    """The embedding call failed or returned no vector."""


class StoreUnavailable(SanadError):  # noqa: N818
    """The vector store could not be reached or rejected an operation."""


class GenerationFailure(SanadError):  # noqa: N818
    """The generation call failed or returned output that fails its schema."""


class ConfigurationError(SanadError, ValueError):
    """A required setting is missing or inconsistent."""
