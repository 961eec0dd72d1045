import pytest

from untis_client.auth import Credentials


@pytest.fixture
def credentials():
    return Credentials(
        server="demo.webuntis.com",
        school="Demo School",
        username="student",
        password="secret",
        user_agent="untis-client-tests",
    )
