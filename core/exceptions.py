"""
Custom exceptions for the POI import pipeline with structured error context.

Each exception carries context information for debugging and is classified
by how far it is allowed to propagate: fatal errors end an import job in the
``error`` state, item-level enrichment errors are absorbed by the enricher
that raised them, and precondition/conflict errors are surfaced to the HTTP
caller without touching job state.

Exception Hierarchy:
    PipelineException (base)
    ├── ExtractionError
    │   ├── GeoQueryError              (fatal)
    │   ├── MetadataEnrichmentError    (item-tolerated)
    │   └── ContentEnrichmentError     (item-tolerated)
    ├── LoadError
    │   └── UpsertError                (fatal)
    ├── ScriptGenerationError
    │   └── LLMServiceUnavailableError (precondition)
    ├── ImportJobError
    │   ├── ImportConflictError        (conflict)
    │   ├── ImportNotFoundError
    │   └── InvalidStateTransition
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any
from datetime import datetime


class PipelineException(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (service, zone, ids, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Extraction / Enrichment Errors
# ============================================================================

class ExtractionError(PipelineException):
    """Base exception for failures talking to an external data service."""
    pass


class GeoQueryError(ExtractionError):
    """
    Raised when the Overpass query fails or returns an unusable payload.

    There are no partial results for a single query, so this always aborts
    the import job.

    Context should include:
        - api_url: The Overpass endpoint
        - status_code: HTTP status code (if applicable)
        - response_body: Response body (truncated)
    """
    pass


class MetadataEnrichmentError(ExtractionError):
    """
    Raised when a Wikidata SPARQL batch cannot be fetched or decoded.

    Context should include:
        - batch_size: Number of ids in the failed batch
        - first_id: First id of the batch
    """
    pass


class ContentEnrichmentError(ExtractionError):
    """
    Raised when a Wikipedia title resolution or article fetch fails.

    Context should include:
        - wikidata_id: The knowledge-base id being resolved
        - language: Language being resolved
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(PipelineException):
    """Base exception for data loading failures."""
    pass


class UpsertError(LoadError):
    """
    Exception raised when the bulk upsert of an import fails.

    The surrounding transaction has been rolled back when this is raised.

    Context should include:
        - zone_id: Zone being imported
        - records_to_load: Size of the batch
    """
    pass


# ============================================================================
# Script Generation Errors
# ============================================================================

class ScriptGenerationError(PipelineException):
    """Base exception for audio-guide script generation failures."""
    pass


class LLMServiceUnavailableError(ScriptGenerationError):
    """
    Raised when the local LLM service cannot be reached or answers with an
    HTTP error.
    """
    pass


# ============================================================================
# Import Job Errors
# ============================================================================

class ImportJobError(PipelineException):
    """Base exception for import job bookkeeping errors."""
    pass


class ImportConflictError(ImportJobError):
    """Raised when an import is requested for a zone that is still importing."""

    def __init__(
        self,
        message: str,
        status: Any,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, context)
        self.status = status


class ImportNotFoundError(ImportJobError):
    """Raised when no import was ever started for a zone."""
    pass


class InvalidStateTransition(ImportJobError):
    """Raised when an import job is moved to a state it cannot reach."""
    pass


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(PipelineException):
    """
    Mixin for errors that should trigger retry logic.

    Use this for transient errors like:
    - Network timeouts
    - Rate limiting (HTTP 429)
    - Service unavailable (HTTP 503)
    """
    pass


class NonRetryableError(PipelineException):
    """
    Mixin for errors that should NOT trigger retry logic.

    Use this for permanent errors like:
    - Invalid data format
    - Resource not found (HTTP 404)
    """
    pass


class NetworkError(RetryableError, ExtractionError):
    """Network-related errors that exhausted their retries."""
    pass


class RateLimitError(RetryableError, ExtractionError):
    """Rate limiting errors (HTTP 429) that exhausted their retries."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        retry_after: Optional[float] = None
    ):
        super().__init__(message, context, original_exception)
        self.retry_after = retry_after
        if retry_after:
            self.context["retry_after"] = retry_after


class ResourceNotFoundError(NonRetryableError, ExtractionError):
    """Resource not found errors (HTTP 404) that should not be retried."""
    pass
