"""
Auto-checkout job.

Runs every minute and walks the occupied rooms:
  - 10 minutes before check_out, the guest and every admin get a
    "stay ending soon" notification.
  - once check_out (plus the configured grace) has passed, the room is reset
    to available, the guest's RFID tags go back to the pool, and guest and
    admins are notified.
"""
import atexit
import logging
import math
import os

from apscheduler.schedulers.background import BackgroundScheduler
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import ROOM_OCCUPIED, utcnow
from notification_service import create_notification, notify_all_admins
from room_service import check_out_room, get_occupied_rooms

logger = logging.getLogger(__name__)

STAY_WARNING_MINUTES = 10


def send_stay_ending_notification(room):
    if not room.guest_id:
        return

    create_notification(
        title='Stay Ending Soon',
        message=f'Your stay for room {room.room_number} ends in {STAY_WARNING_MINUTES} minutes.',
        recipient_guest_id=room.guest_id,
        notification_type='stay_ending_soon',
    )
    notify_all_admins(
        title='Guest Stay Ending Soon',
        message=f'Guest ID {room.guest_id} in room {room.room_number} has {STAY_WARNING_MINUTES} minutes left.',
        notification_type='stay_ending_soon',
    )
    logger.info(f"[CRON] Sent 'stay ending soon' notification for room {room.room_number}")


def auto_check_out_room(room):
    """Reset an expired room and notify; False when the room was no longer occupied"""
    guest_id = room.guest_id
    room_number = room.room_number

    if not check_out_room(room, from_statuses=(ROOM_OCCUPIED,)):
        logger.warning(f"[CRON] Room {room_number} changed state before auto-checkout, skipped")
        return False

    if guest_id:
        create_notification(
            title='Checked Out',
            message=f'You have been automatically checked out of room {room_number}.',
            recipient_guest_id=guest_id,
            notification_type='auto_checkout',
        )
        notify_all_admins(
            title='Guest Auto-Checked Out',
            message=f'Guest ID {guest_id} was auto-checked out from room {room_number}.',
            notification_type='auto_checkout',
        )

    logger.info(f"[CRON] Auto-checked out room {room_number}, set to 'available'.")
    return True


def stay_expired(room, now, grace_minutes=None):
    """True once check_out plus the grace period has passed"""
    if grace_minutes is None:
        grace_minutes = current_app.config.get('AUTO_CHECKOUT_GRACE_MINUTES', 0)
    return (now - room.check_out).total_seconds() >= grace_minutes * 60


def run_checkout_sweep(now=None, grace_minutes=None):
    """One pass over the occupied rooms; returns the room numbers acted upon"""
    now = now or utcnow()
    if grace_minutes is None:
        grace_minutes = current_app.config.get('AUTO_CHECKOUT_GRACE_MINUTES', 0)

    summary = {'warned': [], 'checked_out': []}
    for room in get_occupied_rooms():
        if not room.check_out:
            continue

        room_number = room.room_number
        minutes_left = math.floor((room.check_out - now).total_seconds() / 60)
        expired = stay_expired(room, now, grace_minutes)

        try:
            if expired:
                if auto_check_out_room(room):
                    summary['checked_out'].append(room_number)
            elif minutes_left == STAY_WARNING_MINUTES:
                send_stay_ending_notification(room)
                summary['warned'].append(room_number)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"[CRON] Error processing room {room_number}: {e}")

    return summary


def _run_scheduled_sweep(app):
    with app.app_context():
        logger.debug("[CRON] Running check for expiring stays...")
        summary = run_checkout_sweep()
        if summary['warned'] or summary['checked_out']:
            logger.info(f"[CRON] Sweep result: {summary}")


def _shutdown_scheduler(scheduler):
    if scheduler.running:
        scheduler.shutdown(wait=False)


def init_scheduler(app):
    """Start the once-per-minute job unless disabled in config"""
    if not app.config.get('SCHEDULER_ENABLED'):
        logger.info("[CRON] Scheduler disabled")
        return None

    # The debug reloader imports the app twice; only the child process runs jobs
    if app.debug and os.environ.get('WERKZEUG_RUN_MAIN') != 'true':
        return None

    scheduler = BackgroundScheduler(timezone='UTC')
    scheduler.add_job(_run_scheduled_sweep, 'cron', minute='*', args=[app],
                      id='auto_checkout', max_instances=1, coalesce=True)
    scheduler.start()
    app.extensions['checkout_scheduler'] = scheduler
    atexit.register(_shutdown_scheduler, scheduler)
    logger.info("[CRON] Auto-checkout job scheduled every minute")
    return scheduler
