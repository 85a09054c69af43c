"""
Error detail helpers for the 500 paths of the API.

PostgREST (`postgrest.exceptions.APIError`) and Supabase auth errors
(`AuthApiError`) both carry the remote message on `.message`; it goes into the
`details` field of the response so the caller sees what the datastore said.
"""


def error_message(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    return str(exc) or exc.__class__.__name__


def failure_details(action: str, exc: Exception) -> str:
    """
    Prefix the remote error message with what was being attempted.

    >>> failure_details("Failed to create client", Exception("boom"))
    'Failed to create client: boom'
    """
    return f"{action}: {error_message(exc)}"
