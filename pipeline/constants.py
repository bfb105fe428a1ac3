DEFAULT_CONFIG = {
    "async_row_threshold": 5000,
    "preview_rows": 5000,
    "top_n": 3,
    "top_values": 5,
    "type_threshold": 0.6,
    "date_sample_size": 5,
    "date_sample_hits": 3,
    "excel_serial_min": 30000,
    "excel_serial_max": 60000,
    "dynamic_breakdown_min_unique": 2,
    "dynamic_breakdown_max_unique": 49,
    "min_forecast_points": 3,
    "max_outliers": 50,
    "heartbeat_seconds": 15,
    "logging": {
        "level": "INFO",
    },
}

CATEGORIES = (
    "retail",
    "finance",
    "healthcare",
    "education",
    "technology",
    "manufacturing",
    "general",
)

# job states persisted on the analysis record
STATUS_NONE = "none"
STATUS_BASIC_READY = "basic_ready"
STATUS_ADVANCED_QUEUED = "advanced_queued"
STATUS_ADVANCED_READY = "advanced_ready"
STATUS_FAILED = "failed"

TERMINAL_STATUSES = (STATUS_BASIC_READY, STATUS_ADVANCED_READY, STATUS_FAILED)
