"""Authentication gate.

Two states, LoggedOut and LoggedIn, carried by an explicit ``Session``
value. The only thing persisted is a boolean flag (plus the monthly reset
marker): there is no token and no expiry, so anyone who can edit the client
storage file can skip the password. That is accepted for a personal tool.
"""

import logging
from dataclasses import replace

from budget.domain import Session, parse_timestamp
from budget.gateway import BudgetGateway
from budget.storage import ClientStorage, LAST_RESET_KEY, LOGGED_IN_KEY

logger = logging.getLogger(__name__)


class SessionGuard:

    def __init__(self, storage: ClientStorage):
        self.storage = storage

    def load(self) -> Session:
        authenticated = self.storage.get(LOGGED_IN_KEY) == "true"
        try:
            last_reset = parse_timestamp(self.storage.get(LAST_RESET_KEY))
        except ValueError:
            logger.warning("Ignoring malformed reset marker %r", self.storage.get(LAST_RESET_KEY))
            last_reset = None
        return Session(authenticated=authenticated, last_reset=last_reset)

    def login(self, session: Session, gateway: BudgetGateway, password: str) -> Session:
        # AuthError propagates, the session stays logged out
        gateway.login(password)
        self.storage.set(LOGGED_IN_KEY, "true")
        return replace(session, authenticated=True)

    def logout(self, session: Session) -> Session:
        self.storage.remove(LOGGED_IN_KEY)
        logger.info("Logged out")
        return replace(session, authenticated=False)

    def record_reset(self, session: Session) -> None:
        if session.last_reset is not None:
            self.storage.set(LAST_RESET_KEY, session.last_reset.isoformat())
