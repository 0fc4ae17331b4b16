"""
Unit Tests for the portal exception hierarchy
"""
from contest_portal.core.exceptions import (
    AuthorizationError,
    CapacityExceededError,
    CompetitionNotFoundError,
    ConflictError,
    InvalidCredentialsError,
    InvalidFileTypeError,
    InvalidStateError,
    PortalError,
    ValidationError,
    error_response,
)


class TestStatusCodes:

    def test_taxonomy_maps_to_http_status(self):
        assert ValidationError("bad").status_code == 400
        assert InvalidCredentialsError().status_code == 401
        assert AuthorizationError().status_code == 403
        assert CompetitionNotFoundError(3).status_code == 404
        assert ConflictError("dup").status_code == 400
        assert InvalidStateError("nope").status_code == 400
        assert CapacityExceededError(10).status_code == 400

    def test_base_error_defaults_to_500(self):
        assert PortalError("boom").status_code == 500

    def test_status_code_override(self):
        assert PortalError("teapot", status_code=418).status_code == 418


class TestErrorPayloads:

    def test_error_response_envelope(self):
        body = error_response(CompetitionNotFoundError(42))

        assert body == {
            "success": False,
            "message": "Competition with ID '42' not found",
            "code": "COMPETITION_NOT_FOUND",
        }

    def test_invalid_credentials_message_is_generic(self):
        error = InvalidCredentialsError()
        assert error.message == "Incorrect account or password"
        assert error.code == "INVALID_CREDENTIALS"

    def test_invalid_file_type_details(self):
        error = InvalidFileTypeError("run.exe", "application/x-msdownload", ["image/png", "application/pdf"])

        assert error.status_code == 400
        assert error.code == "INVALID_FILE_TYPE"
        assert error.details["allowed_types"] == ["application/pdf", "image/png"]

    def test_invalid_state_records_status(self):
        error = InvalidStateError("Registration already cancelled", current_status="cancelled")
        assert error.to_dict()["details"] == {"current_status": "cancelled"}
