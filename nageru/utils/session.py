import logging

import requests
from requests.adapters import HTTPAdapter

from ..__version__ import USER_AGENT

logger = logging.getLogger(__name__)


def create_session(user_agent=None) -> requests.Session:
    """A plain session. One attempt per request: nageru never retries an upload."""
    session = requests.Session()

    adapter = HTTPAdapter(max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({'User-Agent': user_agent or USER_AGENT})

    logger.debug(f"User-Agent: {session.headers['User-Agent']}")
    return session
