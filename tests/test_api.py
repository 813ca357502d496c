"""
Tests for the FastAPI endpoints, driven through TestClient against a fresh
in-memory store.
"""


def _auth(employee_id):
    return {"Authorization": f"Bearer {employee_id}"}


def _register(client, username, role, skill="DEVELOPER"):
    response = client.post(
        "/api/v1/employees",
        json={
            "username": username,
            "password": "secret",
            "email": f"{username}@acme.io",
            "role": role,
            "skill": skill,
        },
    )
    assert response.status_code == 201
    return response.json()["data"]


def _project(client, manager_id, **overrides):
    body = {
        "name": "Webshop",
        "customer": "Acme",
        "start_date": "2025-01-01",
        "deadline": "2025-01-10",
    }
    body.update(overrides)
    return client.post(
        "/api/v1/projects", json=body, headers=_auth(manager_id), follow_redirects=False
    )


class TestEmployeesApi:

    def test_register_and_login(self, client):
        anna = _register(client, "anna", "Project Manager")
        assert anna["role"] == "PROJECT_MANAGER"
        assert "password" not in anna

        response = client.post("/api/v1/login", json={"username": "anna", "password": "secret"})
        assert response.status_code == 200
        assert response.json()["data"]["id"] == anna["id"]

    def test_login_failure_is_401(self, client):
        _register(client, "anna", "PROJECT_MANAGER")
        response = client.post("/api/v1/login", json={"username": "anna", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password. Please try again."

    def test_register_without_skill_echoes_input(self, client):
        response = client.post(
            "/api/v1/employees",
            json={"username": "ben", "password": "pw", "email": "ben@acme.io", "role": "TEAM_MEMBER"},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["detail"] == "Please select a skill"
        assert body["input"]["username"] == "ben"
        assert "password" not in body["input"]

    def test_invalid_email_rejected(self, client):
        response = client.post(
            "/api/v1/employees",
            json={"username": "ben", "password": "pw", "email": "not-an-email",
                  "role": "TEAM_MEMBER", "skill": "TESTER"},
        )
        assert response.status_code == 422

    def test_unknown_employee_is_404(self, client):
        assert client.get("/api/v1/employees/99").status_code == 404


class TestProjectsApi:

    def test_create_requires_bearer_token(self, client):
        response = client.post("/api/v1/projects", json={"name": "Webshop"})
        assert response.status_code == 401

    def test_manager_creates_project(self, client):
        anna = _register(client, "anna", "PROJECT_MANAGER")
        response = _project(client, anna["id"])
        assert response.status_code == 201
        project = response.json()["data"]
        assert project["duration"] == 9
        assert project["start_date"] == "2025-01-01"

        mine = client.get("/api/v1/me/projects", headers=_auth(anna["id"])).json()["data"]
        assert [p["id"] for p in mine] == [project["id"]]

    def test_team_member_is_redirected(self, client):
        ben = _register(client, "ben", "TEAM_MEMBER")
        response = _project(client, ben["id"])
        assert response.status_code == 303
        assert response.headers["location"] == "/api/v1/me/projects"
        assert client.get("/api/v1/me/projects", headers=_auth(ben["id"])).json()["data"] == []

    def test_out_of_range_year_is_422_with_input(self, client):
        anna = _register(client, "anna", "PROJECT_MANAGER")
        response = _project(client, anna["id"], start_date="1999-06-01")
        assert response.status_code == 422
        body = response.json()
        assert body["detail"] == "Start date year must be between 2000 and 2100"
        assert body["input"]["name"] == "Webshop"
        assert body["input"]["start_date"] == "1999-06-01"

    def test_update_and_delete(self, client):
        anna = _register(client, "anna", "PROJECT_MANAGER")
        project = _project(client, anna["id"]).json()["data"]

        response = client.patch(
            f"/api/v1/projects/{project['id']}",
            json={"deadline": "2025-01-31"},
            headers=_auth(anna["id"]),
        )
        assert response.status_code == 200
        assert response.json()["data"]["duration"] == 30

        response = client.patch(
            f"/api/v1/projects/{project['id']}",
            json={"name": "Webshop 2"},
            headers=_auth(anna["id"]),
        )
        assert response.json()["data"]["deadline"] == "2025-01-31"

        response = client.patch(
            f"/api/v1/projects/{project['id']}",
            json={"deadline": None},
            headers=_auth(anna["id"]),
        )
        assert response.status_code == 200
        assert response.json()["data"]["deadline"] is None
        assert response.json()["data"]["duration"] == 0

        response = client.delete(f"/api/v1/projects/{project['id']}", headers=_auth(anna["id"]))
        assert response.status_code == 204
        assert client.get(f"/api/v1/projects/{project['id']}").status_code == 404


class TestWorkflowApi:

    def test_member_works_on_assigned_task(self, client):
        anna = _register(client, "anna", "PROJECT_MANAGER")
        ben = _register(client, "ben", "TEAM_MEMBER")
        carl = _register(client, "carl", "TEAM_MEMBER", skill="TESTER")
        project = _project(client, anna["id"]).json()["data"]
        pid = project["id"]

        available = client.get(f"/api/v1/projects/{pid}/available-employees").json()["data"]
        assert {e["username"] for e in available} == {"ben", "carl"}

        members = client.post(
            f"/api/v1/projects/{pid}/members",
            json={"employee_id": ben["id"]},
            headers=_auth(anna["id"]),
        ).json()["data"]
        assert {e["username"] for e in members} == {"anna", "ben"}

        sub_project = client.post(
            f"/api/v1/projects/{pid}/sub-projects",
            json={"name": "Backend"},
            headers=_auth(anna["id"]),
        ).json()["data"]
        spid = sub_project["id"]

        response = client.post(
            f"/api/v1/sub-projects/{spid}/tasks",
            json={"assignee_id": carl["id"], "name": "Payments"},
            headers=_auth(anna["id"]),
        )
        assert response.status_code == 422

        task = client.post(
            f"/api/v1/sub-projects/{spid}/tasks",
            json={"assignee_id": ben["id"], "name": "Checkout", "priority": "High"},
            headers=_auth(anna["id"]),
        ).json()["data"]
        assert task["priority"] == "HIGH"

        seen = client.get(f"/api/v1/sub-projects/{spid}/tasks", headers=_auth(ben["id"])).json()["data"]
        assert [t["id"] for t in seen] == [task["id"]]

        response = client.patch(
            f"/api/v1/tasks/{task['id']}/status",
            json={"status": "In progress"},
            headers=_auth(ben["id"]),
        )
        assert response.json()["data"]["status"] == "IN_PROGRESS"

        response = client.patch(
            f"/api/v1/tasks/{task['id']}/note",
            json={"note": "done"},
            headers=_auth(ben["id"]),
        )
        assert response.json()["data"]["note"] == "done"

        response = client.patch(
            f"/api/v1/tasks/{task['id']}/note",
            json={"note": "mine now"},
            headers=_auth(carl["id"]),
            follow_redirects=False,
        )
        assert response.status_code == 303

        sub_task = client.post(
            f"/api/v1/tasks/{task['id']}/sub-tasks",
            json={"name": "Card validation"},
            headers=_auth(ben["id"]),
        ).json()["data"]
        response = client.patch(
            f"/api/v1/sub-tasks/{sub_task['id']}/status",
            json={"status": "COMPLETED"},
            headers=_auth(ben["id"]),
        )
        assert response.json()["data"]["status"] == "COMPLETED"

        response = client.delete(f"/api/v1/sub-projects/{spid}", headers=_auth(anna["id"]))
        assert response.status_code == 204
        assert client.get(f"/api/v1/tasks/{task['id']}", headers=_auth(anna["id"])).status_code == 404
        assert client.get(f"/api/v1/projects/{pid}/sub-projects").json()["data"] == []

    def test_task_reads_follow_assignment(self, client):
        anna = _register(client, "anna", "PROJECT_MANAGER")
        ben = _register(client, "ben", "TEAM_MEMBER")
        carl = _register(client, "carl", "TEAM_MEMBER", skill="TESTER")
        pid = _project(client, anna["id"]).json()["data"]["id"]
        for employee in (ben, carl):
            client.post(
                f"/api/v1/projects/{pid}/members",
                json={"employee_id": employee["id"]},
                headers=_auth(anna["id"]),
            )
        spid = client.post(
            f"/api/v1/projects/{pid}/sub-projects",
            json={"name": "Backend"},
            headers=_auth(anna["id"]),
        ).json()["data"]["id"]
        task = client.post(
            f"/api/v1/sub-projects/{spid}/tasks",
            json={"assignee_id": ben["id"], "name": "Checkout", "note": "secret"},
            headers=_auth(anna["id"]),
        ).json()["data"]
        url = f"/api/v1/tasks/{task['id']}"

        seen = client.get(f"/api/v1/sub-projects/{spid}/tasks", headers=_auth(carl["id"])).json()["data"]
        assert seen == []

        assert client.get(url).status_code == 401
        assert client.get(f"{url}/sub-tasks").status_code == 401

        response = client.get(url, headers=_auth(carl["id"]), follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/api/v1/me/projects"
        response = client.get(f"{url}/sub-tasks", headers=_auth(carl["id"]), follow_redirects=False)
        assert response.status_code == 303

        response = client.get(url, headers=_auth(ben["id"]))
        assert response.status_code == 200
        assert response.json()["data"]["id"] == task["id"]
        assert client.get(f"{url}/sub-tasks", headers=_auth(anna["id"])).json()["data"] == []

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}
