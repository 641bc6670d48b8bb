class S:
    IDLE = "IDLE"

    USER_WAIT_NAME = "USER_WAIT_NAME"
    USER_SHOW_RESULT = "USER_SHOW_RESULT"

    ADMIN_MENU = "ADMIN_MENU"
    ADMIN_IMPORT_WAIT_FILE = "ADMIN_IMPORT_WAIT_FILE"

    ADMIN_DEL_WAIT_QUERY = "ADMIN_DEL_WAIT_QUERY"
    ADMIN_DEL_SHOW_RESULTS = "ADMIN_DEL_SHOW_RESULTS"
    ADMIN_DEL_CONFIRM = "ADMIN_DEL_CONFIRM"

    ADMIN_NEWS_WAIT_TEXT = "ADMIN_NEWS_WAIT_TEXT"



user_state = {}


def get_state(user_id: int) -> str:
    return user_state.get(user_id, {}).get("state", S.IDLE)


def set_state(user_id: int, state: str, data: dict | None = None):
    if user_id not in user_state:
        user_state[user_id] = {"state": state, "data": {}}
    user_state[user_id]["state"] = state
    if data is not None:
        user_state[user_id]["data"] = data


def get_data(user_id: int) -> dict:
    return user_state.get(user_id, {}).get("data", {})


def reset(user_id: int):
    user_state[user_id] = {"state": S.IDLE, "data": {}}
