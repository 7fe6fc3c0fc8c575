from matchdesk.exceptions import MatchLocked, NotFound, TransportError, ValidationError
from matchdesk.utils.error_messages import get_error_message


class TestGetErrorMessage:
    def test_languages(self):
        assert get_error_message("match_not_found") == "Match not found"
        assert get_error_message("match_not_found", "ru") == "Матч не найден"

    def test_unknown_language_falls_back_to_english(self):
        assert get_error_message("match_not_found", "kz") == "Match not found"

    def test_unknown_key_returned_as_is(self):
        assert get_error_message("no_such_error") == "no_such_error"


class TestLocalizedErrors:
    def test_message_from_code(self):
        error = ValidationError(code="invalid_minute")
        assert error.message == "Event minute must be a positive integer"
        assert error.localized("ru") == "Минута события должна быть положительным целым числом"

    def test_default_code(self):
        error = MatchLocked(7)
        assert error.code == "match_locked"
        assert error.match_id == 7
        assert error.localized("ru") == "Матч завершён и закрыт для изменений"

    def test_explicit_message_not_translated(self):
        error = TransportError("GET /matches/1 timed out")
        assert error.localized("ru") == "GET /matches/1 timed out"

    def test_status_codes(self):
        assert NotFound().status_code == 404
        assert ValidationError().status_code == 422
        assert MatchLocked().status_code == 409
        assert TransportError().status_code == 502
