# timelog/models/__init__.py
from timelog.models.time_entry import TimeEntry
from timelog.models.saved_note import SavedNote
from timelog.models.app_config import AppConfig
