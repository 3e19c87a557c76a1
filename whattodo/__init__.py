"""What-To-Do core library: document model, mutations, and analytics.

Public API re-exports for convenient imports:
    from whattodo import open_tracker, streaks, add_or_update_habit, ...
"""

# Workspace & settings
from whattodo.workspace import (
    data_root,
    settings_path,
    load_settings,
    save_settings,
    get_user_timezone,
    now_local,
    today_str,
    setup_logging,
)

# Errors
from whattodo.errors import (
    TrackerError,
    ValidationError,
    DuplicateNameError,
    NotFoundError,
    ConfirmationRequired,
    ImportParseError,
    PersistenceUnavailable,
)

# Goals
from whattodo.habits import (
    validate_habit,
    add_or_update_habit,
    delete_habit,
    restore_habit,
    toggle_habit_for_date,
    toggle_pin,
    filter_habits,
    categories_in_use,
)

# Tasks
from whattodo.tasks import (
    validate_task,
    validate_subtasks,
    build_due,
    add_or_update_task,
    delete_task,
    restore_task,
    toggle_task_done,
    add_subtask,
    toggle_subtask,
    delete_subtask,
    filter_tasks,
)

# Journal, classes, preferences
from whattodo.journal import save_journal, get_journal
from whattodo.classes import add_or_update_class, delete_class, classes_on
from whattodo.preferences import set_target_date, days_left, adjust_timer_preset

# Vacation
from whattodo.vacation import (
    is_vacation_day,
    vacation_status,
    vacation_summary,
    conflicting_tasks,
    schedule_vacation,
    archive_vacation,
    VacationMonitor,
)

# Analytics
from whattodo.analytics import (
    streaks,
    day_completion,
    completion_ratio,
    month_completion,
    year_heatmap,
    day_preview,
    insights,
)

# Store, undo, wiring
from whattodo.store import (
    KeyValueBackend,
    MemoryBackend,
    JsonFileBackend,
    TrackerStore,
    export_document,
    import_document,
    load_document,
)
from whattodo.timers import Scheduler, ManualScheduler, AsyncioScheduler
from whattodo.undo import UndoController
from whattodo.tracker import Tracker, open_tracker

# Models
from whattodo.models import (
    Habit,
    Task,
    Subtask,
    ClassSession,
    VacationPeriod,
    VacationRecord,
    TimerPresets,
    Document,
    DeleteQueueEntry,
    Settings,
    Streaks,
    MonthCompletion,
    VacationState,
    VacationStatus,
    DayPreview,
    Insight,
    HeatmapCell,
)
