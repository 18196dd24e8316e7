from datetime import datetime, timedelta
from icalendar import Alarm, Calendar, Event


def generate_deadline_ics(title: str, company: str, status_link: str | None,
                          notes: str | None, deadline: str) -> bytes:
    cal = Calendar()
    cal.add("prodid", "-//JobTracker//EN")
    cal.add("version", "2.0")

    event = Event()
    event.add("summary", f"Deadline: {title} at {company}")

    dt = datetime.strptime(deadline, "%Y-%m-%d")
    event.add("dtstart", dt.date())
    event.add("dtend", dt.date() + timedelta(days=1))

    description_parts = []
    if status_link:
        description_parts.append(f"Status link: {status_link}")
    if notes:
        description_parts.append(f"Notes: {notes}")
    if description_parts:
        event.add("description", "\n".join(description_parts))

    # Reminders: 7 days, 2 days, morning of
    for delta in [timedelta(days=7), timedelta(days=2), timedelta(hours=0)]:
        alarm = Alarm()
        alarm.add("action", "DISPLAY")
        alarm.add("trigger", -delta)
        alarm.add("description", f"Deadline reminder: {title}")
        event.add_component(alarm)

    cal.add_component(event)
    return cal.to_ical()
