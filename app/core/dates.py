from datetime import date, datetime
from zoneinfo import ZoneInfo
from app.core.config import settings

def app_timezone() -> ZoneInfo:
    return ZoneInfo(settings.APP_TIMEZONE)

def today() -> date:
    return datetime.now(app_timezone()).date()
