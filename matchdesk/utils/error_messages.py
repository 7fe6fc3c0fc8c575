"""Localized messages for officiating errors."""

ERROR_MESSAGES = {
    "match_locked": {
        "ru": "Матч завершён и закрыт для изменений",
        "en": "Match is finished and locked for changes",
    },
    "match_not_found": {
        "ru": "Матч не найден",
        "en": "Match not found",
    },
    "team_not_found": {
        "ru": "Команда не найдена",
        "en": "Team not found",
    },
    "event_not_found": {
        "ru": "Событие не найдено",
        "en": "Event not found",
    },
    "invalid_minute": {
        "ru": "Минута события должна быть положительным целым числом",
        "en": "Event minute must be a positive integer",
    },
    "team_not_in_match": {
        "ru": "Команда не участвует в этом матче",
        "en": "Team does not play in this match",
    },
    "assistant_is_scorer": {
        "ru": "Автор голевой передачи не может быть автором гола",
        "en": "Assistant cannot be the goal scorer",
    },
    "own_goal_assist": {
        "ru": "У автогола не может быть голевой передачи",
        "en": "Own goal cannot have an assist",
    },
    "same_player_substitution": {
        "ru": "Выходящий и заменяемый игрок совпадают",
        "en": "Player in and player out must differ",
    },
    "lineup_incomplete": {
        "ru": "Для начала матча у обеих команд должно быть ровно 11 игроков основного состава",
        "en": "Both teams must have exactly 11 starting players to begin an official match",
    },
    "invalid_formation": {
        "ru": "Недопустимая схема",
        "en": "Unsupported formation",
    },
    "invalid_slot": {
        "ru": "Недопустимая позиция в схеме",
        "en": "Slot index is outside the formation",
    },
    "player_already_starting": {
        "ru": "Игрок уже в основном составе",
        "en": "Player already occupies a starting slot",
    },
    "player_on_bench": {
        "ru": "Игрок уже в запасе",
        "en": "Player is already on the bench",
    },
    "player_not_in_roster": {
        "ru": "Игрок не заявлен за команду",
        "en": "Player is not on the team roster",
    },
    "position_mismatch": {
        "ru": "Позиция игрока не соответствует позиции в схеме",
        "en": "Player position does not match the formation slot",
    },
    "invalid_score": {
        "ru": "Счёт не может быть отрицательным",
        "en": "Score cannot be negative",
    },
    "invalid_match_time": {
        "ru": "Недопустимое игровое или добавленное время",
        "en": "Invalid regulation or added time",
    },
    "penalties_not_allowed": {
        "ru": "Серия пенальти возможна только в ничейном матче плей-офф",
        "en": "Penalty scores are only allowed for a tied knockout match",
    },
    "halftime_not_allowed": {
        "ru": "Перерыв можно отметить только во время идущего матча",
        "en": "Halftime can only be changed while the match is live",
    },
    "validation_error": {
        "ru": "Некорректные данные",
        "en": "Invalid input",
    },
    "not_found": {
        "ru": "Запись не найдена",
        "en": "Record not found",
    },
    "transport_error": {
        "ru": "Ошибка связи с сервером",
        "en": "Persistence backend request failed",
    },
}


def get_error_message(error_key: str, lang: str = "en") -> str:
    """Get localized error message.

    Args:
        error_key: Key for the error message
        lang: Language code (ru, en)

    Returns:
        Localized error message, falls back to English if not found
    """
    if error_key not in ERROR_MESSAGES:
        return error_key

    messages = ERROR_MESSAGES[error_key]
    return messages.get(lang, messages.get("en", error_key))
