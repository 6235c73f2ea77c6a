from task_tracker.errors import (
    Conflict,
    Forbidden,
    InvalidInput,
    NotFound,
    ServerError,
    Unauthenticated,
    error_from_payload,
)


class TestErrorFromPayload:
    def test_kind_decides_type(self):
        err = error_from_payload(409, {"error": "Conflict", "message": "Email already registered"})
        assert isinstance(err, Conflict)
        assert err.message == "Email already registered"
        assert isinstance(error_from_payload(422, {"error": "ValidationError", "message": "bad"}), InvalidInput)

    def test_known_status_without_our_envelope(self):
        assert isinstance(error_from_payload(401, None), Unauthenticated)
        assert isinstance(error_from_payload(403, {"detail": "nope"}), Forbidden)
        assert isinstance(error_from_payload(404, "<html>"), NotFound)

    def test_other_client_errors_are_invalid_input(self):
        # e.g. a framework-level 400 for a malformed body
        err = error_from_payload(400, {"detail": "There was an error parsing the body"})
        assert isinstance(err, InvalidInput)
        assert err.message == InvalidInput.default_message
        assert isinstance(error_from_payload(405, {"detail": "Method Not Allowed"}), InvalidInput)
        assert isinstance(error_from_payload(418, None), InvalidInput)

    def test_everything_else_is_server_error(self):
        assert isinstance(error_from_payload(502, "<html>Bad Gateway</html>"), ServerError)
        assert isinstance(error_from_payload(503, None), ServerError)
        assert isinstance(error_from_payload(500, {"error": "Mystery"}), ServerError)
