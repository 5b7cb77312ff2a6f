STATUS_PLANNED = "planned"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

GOAL_IN_PROGRESS = "in_progress"
GOAL_COMPLETED = "completed"
GOAL_STATUSES = (GOAL_IN_PROGRESS, GOAL_COMPLETED)

VIEW_ALL = "all"
VIEW_DAILY = "daily"
VIEW_GOAL = "goal"
VIEW_MODES = (VIEW_ALL, VIEW_DAILY, VIEW_GOAL)

FILTER_ALL = "all"
FILTER_COMPLETED = "completed"
FILTER_PENDING = "pending"
COMPLETION_FILTERS = (FILTER_ALL, FILTER_COMPLETED, FILTER_PENDING)

GOAL_FILTER_ALL = "all"
GOAL_FILTER_ACTIVE = "active"
GOAL_FILTER_COMPLETED = "completed"
GOAL_FILTERS = (GOAL_FILTER_ALL, GOAL_FILTER_ACTIVE, GOAL_FILTER_COMPLETED)

OTHER_GROUP_KEY = "other"
UNTITLED_GOAL = "Untitled"

LEVEL_THRESHOLD = 100
XP_PER_TASK = 10
SOON_DAYS = 2

AVATAR_TYPE_TREE = "tree"
AVATAR_STAGES = [
    {"level": 1, "name": "Seed", "description": "Your productivity journey is just starting."},
    {"level": 2, "name": "Sprout", "description": "Keep completing tasks to grow."},
    {"level": 3, "name": "Young Tree", "description": "Good habits are taking root."},
    {"level": 4, "name": "Blossoming Tree", "description": "Your work is starting to bear fruit."},
    {"level": 5, "name": "Fruiting Tree", "description": "Your productivity is at an excellent level."},
    {"level": 6, "name": "Majestic Tree", "description": "You have mastered managing your tasks."},
    {"level": 7, "name": "Ancient Tree", "description": "Your dedication is inspiring."},
]

ACHIEVEMENT_FIRST_TASK = "first_task"
ACHIEVEMENT_TEN_TASKS = "ten_tasks"
ACHIEVEMENT_FIFTY_TASKS = "fifty_tasks"
ACHIEVEMENT_LEVEL_5 = "level_5"
ACHIEVEMENT_WEEK_STREAK = "week_streak"

TASK_ACHIEVEMENTS = [
    (1, ACHIEVEMENT_FIRST_TASK),
    (10, ACHIEVEMENT_TEN_TASKS),
    (50, ACHIEVEMENT_FIFTY_TASKS),
]
LEVEL_ACHIEVEMENTS = [(5, ACHIEVEMENT_LEVEL_5)]
STREAK_ACHIEVEMENTS = [(7, ACHIEVEMENT_WEEK_STREAK)]
