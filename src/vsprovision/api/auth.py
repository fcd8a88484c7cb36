"""Session handling for the vSphere VI/JSON API."""

import httpx

from .exceptions import AuthenticationError

SESSION_HEADER = "vmware-api-session-id"


class AuthHandler:
    """Log in to and out of a vSphere ``SessionManager``."""

    def __init__(self, base_url: str, user: str) -> None:
        """Initialize auth handler.

        Args:
            base_url: VI/JSON base URL (``https://host/sdk/vim25/<release>``)
            user: Username
        """
        self.base_url = base_url
        self.user = user

    def get_session_headers(self, session_id: str) -> dict[str, str]:
        """Get headers for an existing session.

        Args:
            session_id: Session id issued by a previous login

        Returns:
            Headers dict carrying the session id
        """
        return {SESSION_HEADER: session_id}

    async def login(
        self, client: httpx.AsyncClient, session_manager: str, password: str
    ) -> dict[str, str]:
        """Authenticate with username and password.

        Args:
            client: HTTP client to use
            session_manager: ``SessionManager`` managed object id
            password: User password

        Returns:
            Headers dict carrying the new session id

        Raises:
            AuthenticationError: If authentication fails
        """
        try:
            response = await client.post(
                f"{self.base_url}/SessionManager/{session_manager}/Login",
                json={"userName": self.user, "password": password},
            )
        except httpx.RequestError as e:
            raise AuthenticationError(f"Connection failed: {e}")

        if response.status_code >= 400:
            fault = _fault_type(response)
            if fault == "InvalidLogin" or response.status_code == 401:
                raise AuthenticationError("Invalid username or password")
            raise AuthenticationError(f"Authentication failed: {fault or response.status_code}")

        session_id = response.headers.get(SESSION_HEADER)
        if not session_id:
            raise AuthenticationError("Invalid response from server: no session id")
        return self.get_session_headers(session_id)

    async def logout(
        self, client: httpx.AsyncClient, session_manager: str, headers: dict[str, str]
    ) -> None:
        """End the session. Errors are ignored, the session may already be gone.

        Args:
            client: HTTP client to use
            session_manager: ``SessionManager`` managed object id
            headers: Session headers returned by ``login``
        """
        try:
            await client.post(
                f"{self.base_url}/SessionManager/{session_manager}/Logout",
                headers=headers,
            )
        except httpx.RequestError:
            pass


def _fault_type(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    return data.get("_typeName") if isinstance(data, dict) else None
