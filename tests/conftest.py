"""
Shared pytest fixtures for InnerTube client tests.
"""
import pytest
import requests

from innertube.client import YouTubeMusic
from innertube.config import ClientSettings
from innertube.request_builder import RequestBuilder
from innertube.session import Locale, SessionContext
from innertube.transport import RetryPolicy, Transport

# Cookie of a signed-in browser session (values are placeholders)
SIGNED_IN_COOKIE = "SID=g.a000sid; HSID=AbCdEf; SAPISID=sapisid123/AbCdEf; __Secure-3PAPISID=sapisid123/AbCdEf"
VISITOR_DATA = "CgtWaXNpdG9yMDAxKI3x"
FIXED_TIME = 1700000000


@pytest.fixture(autouse=True)
def clear_credential_env(monkeypatch):
    """Keep developer credentials in the environment out of the tests."""
    monkeypatch.delenv("YTM_VISITOR_DATA", raising=False)
    monkeypatch.delenv("YTM_COOKIE", raising=False)


@pytest.fixture
def session():
    """Anonymous session with a known visitor token."""
    return SessionContext(locale=Locale(gl="DE", hl="de"), visitor_data=VISITOR_DATA)


@pytest.fixture
def signed_in_session():
    """Session holding browser cookies."""
    return SessionContext(visitor_data=VISITOR_DATA, cookie=SIGNED_IN_COOKIE)


@pytest.fixture
def builder():
    """Request builder with a frozen clock."""
    return RequestBuilder(clock=lambda: FIXED_TIME)


@pytest.fixture
def http(mocker):
    """Real requests session whose request method is mocked."""
    http_session = requests.Session()
    mocker.patch.object(http_session, "request")
    return http_session


@pytest.fixture
def sleep(mocker):
    """Sleep replacement recording backoff delays."""
    return mocker.Mock()


@pytest.fixture
def transport(session, http, sleep):
    """Transport over the mocked HTTP session."""
    return Transport(
        session,
        timeout=5.0,
        retry_policy=RetryPolicy(max_retries=3, backoff_factor=0.5, max_backoff=8.0),
        sleep=sleep,
        http=http,
    )


@pytest.fixture
def mock_transport(mocker):
    """Transport mock returning canned RawResponses."""
    return mocker.Mock(spec=Transport)


@pytest.fixture
def settings():
    return ClientSettings(max_pages=5, workers=2)


@pytest.fixture
def client(session, mock_transport, settings, builder):
    """Client over a mocked transport."""
    ytm = YouTubeMusic(
        session=session, transport=mock_transport, settings=settings, builder=builder
    )
    yield ytm
    ytm.close()
