"""Public API for the rate-limited goods-labeling registry client.

The client submits ``LP_INTRODUCE_GOODS`` documents to the registry while
honouring its request quota: a :class:`FixedWindowRateLimiter` admits at most
N requests per window and parks the rest until the window rolls over, and a
:class:`DocumentSubmitter` performs exactly one POST per admission.
"""

from CrptApi.cancellation import CancellationToken, CancellationTokenGroup
from CrptApi.documents import Description, Document, Product, load_document, sample_document
from CrptApi.errors import (
    AcquireCancelled,
    AcquireTimeout,
    ConfigurationError,
    CrptApiError,
    DocumentError,
    RateLimitError,
    SubmissionFailure,
)
from CrptApi.ratelimit import FixedWindowRateLimiter, RateSpec, parse_rate_string
from CrptApi.settings import CrptApiSettings, get_settings, load_settings
from CrptApi.submitter import DocumentSubmitter, SubmissionOutcome, SubmissionResult

__version__ = "0.1.0"

__all__ = [
    "AcquireCancelled",
    "AcquireTimeout",
    "CancellationToken",
    "CancellationTokenGroup",
    "ConfigurationError",
    "CrptApiError",
    "CrptApiSettings",
    "Description",
    "Document",
    "DocumentError",
    "DocumentSubmitter",
    "FixedWindowRateLimiter",
    "Product",
    "RateLimitError",
    "RateSpec",
    "SubmissionFailure",
    "SubmissionOutcome",
    "SubmissionResult",
    "__version__",
    "get_settings",
    "load_settings",
    "load_document",
    "parse_rate_string",
    "sample_document",
]
