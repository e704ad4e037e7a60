# disruption_engine/api/errors.py
"""Engine error to HTTP status mapping."""

from fastapi import HTTPException

from ..errors import (
    EngineError,
    InvalidDelay,
    InvalidScenario,
    NotFound,
    RebookingRejected,
    StorageFailure,
)

STATUS_CODES = {
    NotFound: 404,
    InvalidScenario: 404,
    InvalidDelay: 400,
    RebookingRejected: 400,
    StorageFailure: 500,
}


def http_error(error: EngineError) -> HTTPException:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=500, detail=error.message)
