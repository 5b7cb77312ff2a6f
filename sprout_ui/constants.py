TAB_OVERVIEW = "Overview"
TAB_TASKS = "Tasks"
TAB_GOALS = "Goals"
TAB_NOTES = "Notes"
TAB_CALENDAR = "Calendar"
TAB_PROGRESS = "Progress"
TAB_OPTIONS = [TAB_OVERVIEW, TAB_TASKS, TAB_GOALS, TAB_NOTES, TAB_CALENDAR, TAB_PROGRESS]

VIEW_MODE_LABELS = {
    "all": "All tasks",
    "daily": "Daily tasks",
    "goal": "By goal",
}
COMPLETION_LABELS = {
    "all": "All",
    "pending": "Pending",
    "completed": "Completed",
}
GOAL_FILTER_LABELS = {
    "all": "All",
    "active": "Active",
    "completed": "Completed",
}

STATUS_LABELS = {
    "planned": "Planned",
    "in_progress": "In progress",
    "completed": "Completed",
}
DUE_STATUS_LABELS = {
    "overdue": "Overdue",
    "today": "Due today",
    "soon": "Due soon",
    "future": "Upcoming",
    "completed": "Done",
}
DUE_STATUS_COLORS = {
    "overdue": "#D95252",
    "today": "#D9C979",
    "soon": "#8FB6D9",
    "future": "#B8B8B8",
    "completed": "#7FB77E",
}

ACHIEVEMENT_LABELS = {
    "first_task": ("🌱", "First task", "Complete your first task."),
    "ten_tasks": ("🌿", "Ten tasks", "Complete 10 tasks."),
    "fifty_tasks": ("🌳", "Fifty tasks", "Complete 50 tasks."),
    "level_5": ("⭐", "Level 5", "Reach level 5."),
    "week_streak": ("🔥", "Week streak", "Visit seven days in a row."),
}
AVATAR_EMOJI = ["🌰", "🌱", "🌿", "🌳", "🌸", "🍎", "🌲"]

MOTIVATIONAL_QUOTES = [
    "Persistence is the path to success.",
    "In the middle of difficulty lies opportunity.",
    "Success usually comes to those who are too busy to be looking for it.",
    "The secret of getting ahead is getting started.",
    "Small daily improvements lead to stunning results.",
    "Discipline is choosing between what you want now and what you want most.",
    "You don't have to be great to start, but you have to start to be great.",
    "Focus on progress, not perfection.",
]

RECENT_TASKS_LIMIT = 5
RECENT_GOALS_LIMIT = 3
LIVE_REFRESH_SECONDS = 3
