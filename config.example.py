# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from TASKBOARD_* environment variables
(optionally via a local .env file). Do NOT commit site addresses or proxy
keys that are not meant to be public. Use .env (local, gitignored).
"""

ENV_VARS = {
    # App / logging
    "TASKBOARD_APP_NAME": "App display name (default: taskboard).",
    "TASKBOARD_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "TASKBOARD_DATA_DIR": "Local data directory for logs (default: .local/taskboard).",
    # Connectors
    "TASKBOARD_CONSOLE_ENABLED": "Run the interactive console board (true/false, default: true).",
    "TASKBOARD_OFFLINE_MODE": "Use the built-in sample board instead of the site (true/false).",
    # Site / endpoint resolution
    "TASKBOARD_SITE_PAGE_URL": "Address of the page hosting the board; /sites/<name> is detected from it.",
    "TASKBOARD_FALLBACK_SITE_URL": "Site address used when detection fails (a warning is logged).",
    "TASKBOARD_API_ROOT": "REST root below the site (default: _api/web).",
    # Transport
    "TASKBOARD_PROXY_URL": "Proxy address for reads when hosted outside the native site.",
    "TASKBOARD_USE_PROXY": "true / false to force a transport; empty or 'auto' to detect.",
    "TASKBOARD_NATIVE_HOST_SUFFIX": "Hostname suffix of the native site (default: sharepoint.com).",
    # Canonical lists
    "TASKBOARD_TASKS_LIST": "Tasks list title (default: ATL_Project_Plan.v21).",
    "TASKBOARD_SALES_LIST": "Sales data list title (default: ATL-SalesData).",
    "TASKBOARD_ACTIVITY_LIST": "Activity log list title (default: ActivityLog).",
    "TASKBOARD_PEOPLE_LIST": "People map list title (default: PeopleMap).",
    "TASKBOARD_DEFAULT_TOP": "Row limit per read (default: 500).",
    # Board
    "TASKBOARD_ASSIGNEE": "Only show tasks owned by this person (empty => all tasks).",
    "TASKBOARD_MAX_ATTACHMENT_BYTES": "Attachment size limit (default: 10485760).",
    "TASKBOARD_ALLOWED_EXTENSIONS": "Comma/space separated attachment extensions.",
    "TASKBOARD_NOTE_HISTORY_CAP": "Notes kept per task, newest first (default: 50, 0 => unlimited).",
    "TASKBOARD_SEARCH_DEBOUNCE_SECONDS": "Quiet period before a search re-renders (default: 0.3).",
}
