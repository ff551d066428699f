"""ログプレフィックス定数."""


class LogPrefix:
    """ロギング用プレフィックス定数."""

    BATCH_JOB = "[BATCH_JOB]"
    FETCH_HERO = "[FETCH_HERO]"
    SYNC_HERO = "[SYNC_HERO]"
    SEARCH_HERO = "[SEARCH_HERO]"
    UPSERT_HERO = "[UPSERT_HERO]"
    FAVORITE = "[FAVORITE]"
    DB_TIMEOUT = "[DB_TIMEOUT]"
