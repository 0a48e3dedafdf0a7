# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file)
and, for structured values, from a YAML file (see config.example.yaml).

This file exists to make the repo self-documenting without a .env file at hand.
"""

ENV_VARS = {
    # App / logging
    "ONTASK_APP_NAME": "App display name (default: ontask).",
    "ONTASK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "ONTASK_DATA_DIR": "Local data directory for logs and config (default: .local/ontask).",
    "ONTASK_CONFIG_FILE": "YAML config path (default: <data_dir>/config.yaml, optional).",
    # Documents
    "ONTASK_VAULT_ROOT": "Root folder of the markdown notes (default: current directory).",
    "ONTASK_STREAMS": "Comma/space separated stream folders or files, relative to the vault.",
    "ONTASK_DAILY_NOTES": "Include date-named documents (true/false, default: true).",
    "ONTASK_FOLDER": "Optional custom folder to scan, relative to the vault.",
    "ONTASK_INCLUDE_SUBFOLDERS": "Scan below the custom folder recursively (default: true).",
    # Scanning
    "ONTASK_LOAD_MORE_LIMIT": "Tasks per page (default: 10).",
    "ONTASK_ONLY_SHOW_TODAY": "Only scan documents dated today (default: false).",
    "ONTASK_STATUS_FILTERS": "Enabled status symbols, e.g. './!x' ('_' = space). Default: all known.",
}
