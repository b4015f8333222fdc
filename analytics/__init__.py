from .models import (
    ActivityRecord,
    AIMaterial,
    DailyActivity,
    Level,
    MaterialType,
    QuizScore,
    Subject,
    level_for_xp,
)
from .storage import ActivityPersistence, FileStorage, KeyValueStorage, MemoryStorage
from .activity_store import ActivityStore
from . import metrics

__all__ = [
    'ActivityRecord',
    'AIMaterial',
    'DailyActivity',
    'Level',
    'MaterialType',
    'QuizScore',
    'Subject',
    'level_for_xp',
    'ActivityPersistence',
    'FileStorage',
    'KeyValueStorage',
    'MemoryStorage',
    'ActivityStore',
    'metrics'
]
