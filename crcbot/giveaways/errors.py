class GiveawayError(Exception):
    """Базовая ошибка розыгрышей. message показывается пользователю."""

    message = "Could not process the giveaway (error)."

    def __init__(self, message: str = None):
        if message:
            self.message = message
        super().__init__(self.message)


class ValidationError(GiveawayError):
    """Неверные данные формы: нет приза или длительность не распознана"""

    message = "Invalid form: please provide Prize and a valid Duration (e.g. `1h 30m`, `2d`, `45m`)."


class Forbidden(GiveawayError):
    """У пользователя нет роли, необходимой для участия"""

    def __init__(self, role_id: str):
        self.role_id = role_id
        super().__init__(f"You need <@&{role_id}> to join this giveaway.")


class PostFailure(GiveawayError):
    """Анонс не опубликован, хотя розыгрыш уже сохранен в базе"""

    def __init__(self, giveaway_id: int, status_code: int = None):
        self.giveaway_id = giveaway_id
        self.status_code = status_code
        detail = f"HTTP {status_code}" if status_code else "network error"
        super().__init__(f"Couldn't post giveaway ({detail}).")


class StoreFailure(GiveawayError):
    """Любая ошибка базы данных, кроме повторного участия"""

    message = "Could not save your entry right now, please try again later."
