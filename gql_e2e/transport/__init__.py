"""Transport module - GraphQL over HTTP."""

from .http_client import (
    GraphQLHttpClient,
    HttpContext,
    HttpEnvironment,
    HttpSessionScope,
)
from .retry_policy import (
    RetryPolicy,
    no_retry_policy,
    retry_policy_for,
)

__all__ = [
    "GraphQLHttpClient",
    "HttpContext",
    "HttpEnvironment",
    "HttpSessionScope",
    "RetryPolicy",
    "no_retry_policy",
    "retry_policy_for",
]
