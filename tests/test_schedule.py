"""Tests for the daily late-loan notification."""

from datetime import date, datetime, time, timedelta
from threading import Event
from unittest.mock import Mock

import pytest
from sqlmodel import Session

from library.config import default_config
from library.database import init_db, make_engine
from library.models import Book, Loan
from library.schedule import (
    run_daily,
    run_late_loans_job,
    seconds_until_next_run,
    send_mail_to_late_loans,
    start_late_loans_scheduler,
)
from library.services import LoanService


def _loan(email):
    return Loan(customer="Ciclano", customer_email=email, loan_date=date(2024, 1, 1))


def test_sends_one_mail_to_every_late_customer():
    loan_service = Mock(spec=LoanService)
    loan_service.get_all_late_loans.return_value = [_loan("a@email.com"), _loan("b@email.com")]
    email_service = Mock()

    recipients = send_mail_to_late_loans(loan_service, email_service, "Late!")

    assert recipients == ["a@email.com", "b@email.com"]
    email_service.send_mails.assert_called_once_with("Late!", ["a@email.com", "b@email.com"])


def test_loans_without_email_are_skipped():
    loan_service = Mock(spec=LoanService)
    loan_service.get_all_late_loans.return_value = [_loan(None), _loan("b@email.com")]
    email_service = Mock()

    recipients = send_mail_to_late_loans(loan_service, email_service, "Late!")

    assert recipients == ["b@email.com"]


def test_nothing_sent_without_late_loans():
    loan_service = Mock(spec=LoanService)
    loan_service.get_all_late_loans.return_value = []
    email_service = Mock()

    assert send_mail_to_late_loans(loan_service, email_service, "Late!") == []
    email_service.send_mails.assert_not_called()


def test_run_late_loans_job_reads_database(tmp_path, monkeypatch):
    db_file = tmp_path / "test.db"
    engine = make_engine(db_file)
    monkeypatch.setattr("library.database.engine", engine, raising=True)
    init_db()

    with Session(engine) as session:
        book = Book(title="A Cabana", author="Pâmela", isbn="034")
        session.add(book)
        session.commit()
        session.refresh(book)
        session.add(Loan(book_id=book.id, customer="Late", customer_email="late@email.com",
                         loan_date=date.today() - timedelta(days=5)))
        session.add(Loan(book_id=book.id, customer="Fresh", customer_email="fresh@email.com",
                         loan_date=date.today()))
        session.commit()

    config = default_config()
    email_service = Mock()

    recipients = run_late_loans_job(config, email_service=email_service)

    assert recipients == ["late@email.com"]
    email_service.send_mails.assert_called_once_with(
        config.mail.late_loans_message, ["late@email.com"]
    )


@pytest.mark.parametrize(
    "now, run_at, expected",
    [
        (datetime(2024, 5, 20, 23, 0), time(0, 0), 3600),
        (datetime(2024, 5, 20, 0, 0), time(0, 0), 24 * 3600),
        (datetime(2024, 5, 20, 8, 30), time(9, 0), 1800),
    ],
)
def test_seconds_until_next_run(now, run_at, expected):
    assert seconds_until_next_run(now, run_at) == expected


def test_run_daily_runs_job_and_survives_errors():
    stop_event = Event()
    calls = []

    def job():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("smtp down")
        stop_event.set()

    # Clock one microsecond before the run time so each wait is immediate
    run_daily(job, time(0, 0), stop_event, clock=lambda: datetime(2024, 5, 20, 23, 59, 59, 999999))

    assert len(calls) == 2


def test_scheduler_disabled_by_config():
    config = default_config()
    config.schedule.enabled = False

    assert start_late_loans_scheduler(config) is None


def test_scheduler_thread_starts_and_stops():
    config = default_config()

    scheduler = start_late_loans_scheduler(config)

    assert scheduler is not None
    worker, stop_event = scheduler
    assert worker.daemon
    assert worker.is_alive()
    stop_event.set()
    worker.join(timeout=5)
    assert not worker.is_alive()
