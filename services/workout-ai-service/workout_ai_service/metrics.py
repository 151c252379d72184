from prometheus_client import Counter

WORKOUTS_GENERATED_TOTAL = Counter(
    "workout_ai_workouts_generated_total",
    "Number of workouts generated and validated",
    ["mode"],  # on_demand | adaptive
)

WORKOUT_GENERATION_FAILURES_TOTAL = Counter(
    "workout_ai_generation_failures_total",
    "Number of workout generations that produced no workout",
    ["mode", "kind"],
)

DAILY_EMAILS_SENT_TOTAL = Counter(
    "workout_ai_daily_emails_sent_total",
    "Number of daily workout emails sent",
    ["mode"],  # production | test
)

DAILY_EMAILS_FAILED_TOTAL = Counter(
    "workout_ai_daily_emails_failed_total",
    "Number of daily workout recipients that failed",
    ["kind"],
)

DAILY_EMAILS_SKIPPED_TOTAL = Counter(
    "workout_ai_daily_emails_skipped_total",
    "Number of daily workout recipients skipped for lack of an email address",
)

UPGRADE_REQUESTS_SENT_TOTAL = Counter(
    "workout_ai_upgrade_requests_sent_total",
    "Number of premium upgrade request emails sent",
)
