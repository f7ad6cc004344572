"""Errors raised by the fact-check pipeline and translated to HTTP responses by the API layer."""


class FactCheckError(Exception):
    """Base class for fact-check pipeline failures."""

    status_code = 500


class NoSearchResultsError(FactCheckError):
    """Web search produced no usable results for the claim."""

    status_code = 404

    def __init__(self, message: str = "No results found. The claim may be too new or too obscure."):
        super().__init__(message)


class LLMServiceError(FactCheckError):
    """The generative model could not produce a response."""

    status_code = 502
