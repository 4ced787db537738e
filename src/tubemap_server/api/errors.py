from __future__ import annotations

from typing import Any

from tubemap_server.api.schemas import ErrorDetail
from tubemap_server.errors import PipelineError


def error_payload(exc: PipelineError) -> dict[str, Any]:
    """Body returned for a failed request.

    Failures keep the HTTP success status the tube map client expects and are
    told apart from an empty result by the ``error`` key.
    """
    detail = ErrorDetail(kind=exc.kind, message=exc.message, stage=exc.stage)
    return {"error": detail.model_dump(exclude_none=True)}
