# Copyright 2025-present DatusAI, Inc.
# Licensed under the Apache License, Version 2.0.
# See http://www.apache.org/licenses/LICENSE-2.0 for details.

from typing import Optional

from datus.utils.exceptions import DatusException, ErrorCode


class RedshiftPluginError(DatusException):
    """
    Base class for errors raised by the Redshift plugin.

    Each subclass pins a Datus ErrorCode so the host can classify the failure,
    and keeps the plugin's own message in ``detail``.
    """

    error_code: ErrorCode = ErrorCode.DB_FAILED

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(self.error_code, detail)


class ConfigurationError(RedshiftPluginError):
    """The datasource configuration is missing something needed to connect."""

    error_code = ErrorCode.COMMON_FIELD_INVALID

    def __init__(self, detail: str, field: Optional[str] = None):
        self.field = field
        super().__init__(detail)


class ConnectivityError(RedshiftPluginError):
    """Opening the connection, running the liveness check or reading metadata failed."""

    error_code = ErrorCode.DB_CONNECTION_FAILED


class QueryExecutionError(RedshiftPluginError):
    """A user statement failed."""

    error_code = ErrorCode.DB_EXECUTION_ERROR


def driver_error_message(e: BaseException) -> str:
    """
    Return the human-readable part of a driver exception.

    redshift_connector raises server errors with the raw error-response fields
    as a dict (``{"S": "ERROR", "C": "42P01", "M": "relation ... does not exist"}``);
    the ``M`` field is the message. Anything else falls back to ``str(e)``.
    """
    if isinstance(e, RedshiftPluginError):
        return e.detail
    if e.args and isinstance(e.args[0], dict):
        fields = e.args[0]
        message = fields.get("M")
        if message:
            return str(message)
    return str(e)
