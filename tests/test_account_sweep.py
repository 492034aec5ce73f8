"""Tests for the periodic account housekeeping job."""

from datetime import timedelta
from unittest.mock import patch

from src.adapters.db.repositories.account_deletion_repo import AccountDeletionRepository
from src.adapters.db.repositories.email_verification_repo import EmailVerificationRepository
from src.adapters.db.repositories.user_repo import UserRepository
from src.data.enums.deletion_status import DeletionStatus
from src.jobs import account_sweep
from src.services.account_deletion_service import AccountDeletionService
from src.services.email_change_service import EmailChangeService
from src.util.time import utcnow
from tests.conftest import PASSWORD


def test_run_sweep(db_session, mailer, user, other_user):
    now = utcnow()
    AccountDeletionService(db_session, mailer).request_deletion(user, PASSWORD, True, now=now - timedelta(days=31))
    EmailChangeService(db_session, mailer).request_change(
        other_user, "bob.new@example.com", PASSWORD, now=now - timedelta(hours=2)
    )
    user_id = user.id

    result = account_sweep.run_sweep(db_session)

    assert result == {"accounts_deleted": 1, "verifications_removed": 1}
    assert UserRepository(db_session).get_user_by_id(user_id) is None
    assert EmailVerificationRepository(db_session).list_for_user(other_user.id) == []
    rows = AccountDeletionRepository(db_session).get_due(utcnow())
    assert rows == []


def test_main_uses_a_fresh_session(db_session, mailer, user):
    AccountDeletionService(db_session, mailer).request_deletion(
        user, PASSWORD, True, now=utcnow() - timedelta(days=40)
    )
    deletion_id = AccountDeletionRepository(db_session).list_for_user(user.id)[0].id

    with patch.object(account_sweep, "SessionLocal", return_value=db_session):
        assert account_sweep.main(["--limit", "10"]) == 0

    deletion = AccountDeletionRepository(db_session).get_by_id(deletion_id)
    assert deletion.status == DeletionStatus.COMPLETED
