# backend/services/calendar_service.py
import logging
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

import config
from models import User

logger = logging.getLogger(__name__)

SCOPES = ['https://www.googleapis.com/auth/calendar.events']

# Google Calendar event colour ids.
STATUS_COLORS = {
    "Present": "10",  # green
    "Absent": "11",  # red
    "Cancelled": "5",  # yellow
}

def get_credentials(user: User):
    """Exchanges the stored refresh token for a fresh access token, or returns None."""
    creds = Credentials(
        token=None,
        refresh_token=user.refreshToken,
        token_uri=config.GOOGLE_TOKEN_URI,
        client_id=config.GOOGLE_CLIENT_ID,
        client_secret=config.GOOGLE_CLIENT_SECRET,
        scopes=SCOPES,
    )
    try:
        creds.refresh(Request())
    except GoogleAuthError as error:
        logger.error("Failed to get access token for user %s: %s", user.id, error)
        return None
    return creds

def get_calendar_service(creds: Credentials):
    """Builds and returns an authenticated Google Calendar API service object."""
    return build('calendar', 'v3', credentials=creds, static_discovery=False)

def build_attendance_event(course_name: str, status: str, now: Optional[datetime] = None) -> dict:
    start = now or datetime.now(ZoneInfo(config.CALENDAR_TIMEZONE))
    end = start + timedelta(hours=1)
    return {
        'summary': f"{course_name} - {status}",
        'description': f"Attendance marked as {status} for {course_name}",
        'start': {
            'dateTime': start.isoformat(),
            'timeZone': config.CALENDAR_TIMEZONE,
        },
        'end': {
            'dateTime': end.isoformat(),
            'timeZone': config.CALENDAR_TIMEZONE,
        },
        'colorId': STATUS_COLORS.get(status, "0"),
    }

def create_calendar_event(service, event: dict):
    """Creates a new event on the user's primary calendar."""
    try:
        created_event = service.events().insert(calendarId='primary', body=event).execute()
        logger.info("Calendar event created: %s", created_event.get('htmlLink'))
        return {"status": "success", "link": created_event.get('htmlLink')}
    except HttpError as error:
        logger.error("Calendar event creation failed: %s", error)
        return {"status": "error", "message": str(error)}

def notify_attendance(user: User, course_name: str, status: str) -> None:
    """Records an attendance change on the user's Google Calendar.

    Runs as a background task after the HTTP response is sent; every failure
    is logged here and never reaches the caller.
    """
    if user is None or not user.refreshToken:
        logger.info("No refresh token available for calendar event")
        return
    if not config.GOOGLE_CLIENT_ID or not config.GOOGLE_CLIENT_SECRET:
        logger.error("Missing Google credentials; skipping calendar event")
        return
    try:
        creds = get_credentials(user)
        if creds is None:
            return
        service = get_calendar_service(creds)
        create_calendar_event(service, build_attendance_event(course_name, status))
    except Exception:
        logger.exception("Google Calendar integration error")
