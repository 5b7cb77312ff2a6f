from sprout_ui.data import api_client


def _items(payload):
    return list((payload or {}).get("items") or [])


def sign_in(email, password):
    return api_client.request(
        "POST", "/v1/auth/sign-in", json={"email": email, "password": password}, authenticated=False
    )


def sign_up(email, password):
    return api_client.request(
        "POST", "/v1/auth/sign-up", json={"email": email, "password": password}, authenticated=False
    )


def federated_sign_in(id_token, provider_id="google.com"):
    return api_client.request(
        "POST",
        "/v1/auth/federated",
        json={"provider_id": provider_id, "id_token": id_token},
        authenticated=False,
    )


def sign_out():
    return api_client.request("POST", "/v1/auth/sign-out", authenticated=False)


def bootstrap():
    return api_client.request("GET", "/v1/bootstrap")


def task_view(mode="all", goal_id=None, completion="all", limit=None):
    params = {"mode": mode, "completion": completion}
    if goal_id:
        params["goal_id"] = goal_id
    if limit:
        params["limit"] = int(limit)
    return api_client.request("GET", "/v1/tasks/view", params=params)


def list_tasks():
    return _items(api_client.request("GET", "/v1/tasks"))


def recent_tasks(limit=5):
    return _items(api_client.request("GET", "/v1/tasks/recent", params={"limit": int(limit)}))


def calendar_tasks(day):
    return _items(api_client.request("GET", "/v1/tasks/calendar", params={"day": day.isoformat()}))


def create_task(title, description="", is_daily=False, goal_id=None, due_date=None):
    payload = {
        "title": title,
        "description": description or "",
        "is_daily": bool(is_daily),
        "goal_id": goal_id or None,
        "due_date": due_date.isoformat() if due_date else None,
    }
    return api_client.request("POST", "/v1/tasks", json=payload)


def update_task(task_id, fields):
    clean = dict(fields or {})
    if clean.get("due_date") is not None and hasattr(clean["due_date"], "isoformat"):
        clean["due_date"] = clean["due_date"].isoformat()
    return api_client.request("PATCH", f"/v1/tasks/{task_id}", json=clean)


def toggle_task(task_id):
    return api_client.request("POST", f"/v1/tasks/{task_id}/toggle")


def delete_task(task_id):
    return api_client.request("DELETE", f"/v1/tasks/{task_id}")


def list_goals():
    return _items(api_client.request("GET", "/v1/goals"))


def goal_summaries(status="all"):
    return _items(api_client.request("GET", "/v1/goals/summary", params={"status": status}))


def recent_goals(limit=3):
    return _items(api_client.request("GET", "/v1/goals/recent", params={"limit": int(limit)}))


def create_goal(title, description="", target_date=None):
    payload = {
        "title": title,
        "description": description or "",
        "target_date": target_date.isoformat() if target_date else None,
    }
    return api_client.request("POST", "/v1/goals", json=payload)


def update_goal(goal_id, fields):
    return api_client.request("PATCH", f"/v1/goals/{goal_id}", json=dict(fields or {}))


def toggle_goal(goal_id):
    return api_client.request("POST", f"/v1/goals/{goal_id}/toggle")


def recalculate_goal(goal_id):
    return api_client.request("POST", f"/v1/goals/{goal_id}/recalculate")


def delete_goal(goal_id):
    return api_client.request("DELETE", f"/v1/goals/{goal_id}")


def list_notes():
    return _items(api_client.request("GET", "/v1/notes"))


def create_note(title, content=""):
    return api_client.request("POST", "/v1/notes", json={"title": title, "content": content or ""})


def update_note(note_id, fields):
    return api_client.request("PATCH", f"/v1/notes/{note_id}", json=dict(fields or {}))


def delete_note(note_id):
    return api_client.request("DELETE", f"/v1/notes/{note_id}")


def get_progress():
    return api_client.request("GET", "/v1/progress")


def sync_progress():
    return api_client.request("POST", "/v1/progress/sync")


def get_stats():
    return api_client.request("GET", "/v1/stats")
