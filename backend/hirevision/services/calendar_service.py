from datetime import datetime, timedelta, timezone
from icalendar import Calendar, Event, Alarm

from hirevision.utils.timestamps import TIMESTAMP_FORMAT


def generate_interview_ics(
    interview_id: str,
    job_title: str,
    company: str | None,
    candidate_name: str,
    interview_type: str,
    scheduled_at: str,
    duration_minutes: int,
    location: str | None,
    notes: str | None,
) -> bytes:
    cal = Calendar()
    cal.add("prodid", "-//HireVision//EN")
    cal.add("version", "2.0")

    event = Event()
    event.add("uid", f"{interview_id}@hirevision")
    summary = f"{interview_type.capitalize()} interview: {candidate_name} for {job_title}"
    if company:
        summary += f" at {company}"
    event.add("summary", summary)

    start = datetime.strptime(scheduled_at, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    event.add("dtstart", start)
    event.add("dtend", start + timedelta(minutes=duration_minutes))
    if location:
        event.add("location", location)
    if notes:
        event.add("description", notes)

    # Reminders: a day before and 15 minutes before
    for delta in [timedelta(days=1), timedelta(minutes=15)]:
        alarm = Alarm()
        alarm.add("action", "DISPLAY")
        alarm.add("trigger", -delta)
        alarm.add("description", f"Interview reminder: {job_title}")
        event.add_component(alarm)

    cal.add_component(event)
    return cal.to_ical()
