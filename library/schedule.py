"""Daily late-loan notification for libraryapi.

A daemon thread sleeps until the configured time of day (midnight by
default), emails every customer holding a late loan, and goes back to sleep.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from threading import Event, Thread
from typing import Callable, List, Optional, Tuple

from sqlmodel import Session

from .config import LibraryApiConfig
from .database import get_engine
from .logging_config import get_logger
from .mailer import EmailService, SmtpEmailService
from .repository import LoanRepository
from .services import LoanService

logger = get_logger(__name__)


def send_mail_to_late_loans(
    loan_service: LoanService, email_service: EmailService, message: str
) -> List[str]:
    """Send *message* to the customers of all late loans. Returns the recipients."""
    loans = loan_service.get_all_late_loans()
    mail_list = [loan.customer_email for loan in loans if loan.customer_email]
    if not mail_list:
        logger.info("No late loans with a customer email; nothing to send")
        return []

    email_service.send_mails(message, mail_list)
    logger.info(f"Late-loan notice sent to {len(mail_list)} customer(s)")
    return mail_list


def run_late_loans_job(
    config: LibraryApiConfig, email_service: Optional[EmailService] = None
) -> List[str]:
    """Run the late-loan notification once against the application database."""
    mailer = email_service or SmtpEmailService(config.mail)
    with Session(get_engine()) as session:
        loan_service = LoanService(
            LoanRepository(session), late_after_days=config.loans.late_after_days
        )
        return send_mail_to_late_loans(
            loan_service, mailer, config.mail.late_loans_message
        )


def seconds_until_next_run(now: datetime, run_at: time) -> float:
    """Seconds from *now* to the next occurrence of *run_at* (always > 0)."""
    next_run = datetime.combine(now.date(), run_at, tzinfo=now.tzinfo)
    if next_run <= now:
        next_run += timedelta(days=1)
    return (next_run - now).total_seconds()


def run_daily(
    job: Callable[[], object],
    run_at: time,
    stop_event: Event,
    clock: Callable[[], datetime] = datetime.now,
) -> None:
    """Worker loop: wait for *run_at*, run *job*, repeat until *stop_event* is set."""
    while not stop_event.wait(timeout=seconds_until_next_run(clock(), run_at)):
        try:
            job()
        except Exception as e:
            logger.error(f"Late-loan job failed: {e}")


def start_late_loans_scheduler(
    config: LibraryApiConfig,
) -> Optional[Tuple[Thread, Event]]:
    """Start the daily late-loan thread if enabled in config."""
    if not config.schedule.enabled:
        return None

    stop_event = Event()
    worker = Thread(
        target=run_daily,
        args=(lambda: run_late_loans_job(config), config.schedule.run_at, stop_event),
        daemon=True,
        name="LibraryLateLoansScheduler",
    )
    worker.start()
    logger.info(f"Late-loan notices scheduled daily at {config.schedule.run_at:%H:%M}")
    return worker, stop_event
