import requests
from typing import Optional


class ApiError(Exception):
    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class TaskFlowClient:
    """Thin client for the TaskFlow JSON API, keeping the session cookie."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs):
        try:
            response = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ApiError(None, str(e)) from e

        if not response.ok:
            try:
                message = response.json().get('error', response.reason)
            except ValueError:
                message = response.text or response.reason
            raise ApiError(response.status_code, message)

        if not response.content:
            return None
        return response.json()

    def login(self, email: str, password: str) -> dict:
        return self._request('POST', '/auth/login', json={'email': email, 'password': password})

    def logout(self):
        return self._request('POST', '/auth/logout')

    def board(self, project_id: int) -> dict:
        return self._request('GET', f'/api/projects/{project_id}/board')

    def list_tasks(self, project_id: int, status: Optional[str] = None) -> list:
        params = {'status': status} if status else None
        return self._request('GET', f'/api/projects/{project_id}/tasks', params=params)

    def create_task(self, project_id: int, title: str, **fields) -> dict:
        return self._request('POST', f'/api/projects/{project_id}/tasks', json=dict(fields, title=title))

    def update_task(self, project_id: int, task_id: int, **changes) -> dict:
        return self._request('PUT', f'/api/projects/{project_id}/tasks/{task_id}', json=changes)

    def move_task(self, project_id: int, task_id: int, status: str, index: Optional[int] = None) -> dict:
        payload = {'status': status}
        if index is not None:
            payload['index'] = index
        return self._request('POST', f'/api/projects/{project_id}/tasks/{task_id}/move', json=payload)

    def delete_task(self, project_id: int, task_id: int):
        return self._request('DELETE', f'/api/projects/{project_id}/tasks/{task_id}')

    def sender(self, project_id: int):
        """
        Callable for ``OptimisticBoard.move`` that stores the position the
        board computed, along with the destination status.
        """
        def send(move):
            return self.update_task(project_id, move.task_id, status=move.destination_status,
                                    position=move.position)
        return send
